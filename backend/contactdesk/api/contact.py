import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from contactdesk.database import get_session
from contactdesk.models.contact import ContactSubmission

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contact"])

THANK_YOU_MESSAGE = "Thank you for your message! We'll get back to you soon."


class ContactSubmissionCreate(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True
    )

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    company: str | None = None
    service: str | None = None
    message: str = Field(min_length=1)

    @field_validator("company", "service")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None


class ContactSubmissionRead(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    first_name: str
    last_name: str
    email: str
    company: str | None
    service: str | None
    message: str
    created_at: datetime


class ContactCreatedResponse(BaseModel):
    success: bool = True
    message: str = THANK_YOU_MESSAGE
    id: int


@router.post("/contact", response_model=ContactCreatedResponse, status_code=201)
async def create_contact_submission(
    body: ContactSubmissionCreate,
    session: Session = Depends(get_session),
):
    submission = ContactSubmission(**body.model_dump())
    try:
        session.add(submission)
        session.commit()
        session.refresh(submission)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to store contact submission")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Something went wrong. Please try again later.",
            },
        )
    logger.info(f"Stored contact submission {submission.id}")
    return ContactCreatedResponse(id=submission.id)
