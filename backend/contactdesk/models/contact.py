from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class ContactSubmission(SQLModel, table=True):
    __tablename__ = "contact_submissions"

    id: int | None = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str
    company: str | None = Field(default=None)
    service: str | None = Field(default=None)  # "custom-software" | "ai-saas" | "consulting" | "other"
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
