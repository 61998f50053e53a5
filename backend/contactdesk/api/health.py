import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from contactdesk.context import AppContext, get_context
from contactdesk.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    return {"ok": True}


@router.get("/config")
async def health_config(context: AppContext = Depends(get_context)):
    """Report which settings are present without echoing their values."""
    settings = context.settings
    return {
        "ok": True,
        "hasDbUrl": bool(settings.database_url),
        "hasSessionDbUrl": bool(settings.session_db_url),
        "hasSecret": bool(settings.session_secret),
    }


@router.get("/db")
async def health_db(session: Session = Depends(get_session)):
    try:
        session.connection().execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return JSONResponse(status_code=503, content={"ok": False})
    return {"ok": True}
