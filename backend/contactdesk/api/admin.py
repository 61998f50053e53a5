import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from contactdesk.api.contact import ContactSubmissionRead
from contactdesk.api.deps import get_current_admin, get_web_session
from contactdesk.auth import verify_password
from contactdesk.database import get_session
from contactdesk.models.contact import ContactSubmission
from contactdesk.models.user import AdminUser
from contactdesk.sessions import ServerSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class SessionUser(BaseModel):
    id: int
    username: str
    role: str


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Logged in successfully"
    user: SessionUser


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest | None = None,
    session: Session = Depends(get_session),
    web_session: ServerSession = Depends(get_web_session),
):
    if body is None or not body.username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    user = session.exec(
        select(AdminUser).where(AdminUser.username == body.username)
    ).first()
    if not user or not verify_password(body.password, user.password_hash):
        logger.info(f"Failed admin login for {body.username!r}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    session_user = SessionUser(id=user.id, username=user.username, role=user.role or "admin")
    web_session.regenerate()
    web_session["user"] = session_user.model_dump()
    logger.info(f"Admin {user.username!r} logged in")
    return LoginResponse(user=session_user)


@router.get("/user")
async def current_user(user: dict = Depends(get_current_admin)):
    return user


@router.post("/logout")
async def logout(web_session: ServerSession = Depends(get_web_session)):
    web_session.destroy()
    return {"success": True, "message": "Logged out successfully"}


@router.get("/contact-submissions", response_model=list[ContactSubmissionRead])
async def list_contact_submissions(
    session: Session = Depends(get_session),
    _admin: dict = Depends(get_current_admin),
):
    try:
        return session.exec(
            select(ContactSubmission).order_by(
                col(ContactSubmission.created_at).desc(), col(ContactSubmission.id).desc()
            )
        ).all()
    except SQLAlchemyError:
        logger.exception("Failed to load contact submissions")
        return JSONResponse(
            status_code=500,
            content={"message": "Failed to retrieve contact submissions"},
        )
