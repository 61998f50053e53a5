from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class SessionRecord(SQLModel, table=True):
    __tablename__ = "sessions"

    sid: str = Field(primary_key=True, max_length=255)
    sess: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    expire: datetime = Field(index=True)  # UTC
