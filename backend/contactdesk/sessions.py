"""Server-side sessions stored in the ``sessions`` table.

The cookie only carries a signed session id. Everything else lives in the
database row, which is the single source of truth for who is logged in.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from sqlalchemy.engine import Engine
from sqlmodel import Session, select
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from contactdesk.auth import sign_session_id, unsign_session_id
from contactdesk.config import Settings
from contactdesk.models.session import SessionRecord

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to timestamps read back from backends that drop the offset."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class SessionStore:
    def __init__(self, engine: Engine, max_age: timedelta):
        self.engine = engine
        self.max_age = max_age

    @staticmethod
    def new_id() -> str:
        return secrets.token_urlsafe(32)

    def load(self, sid: str) -> dict | None:
        """Return the stored data for ``sid``, dropping the row if it has expired."""
        with Session(self.engine) as db:
            record = db.get(SessionRecord, sid)
            if record is None:
                return None
            if as_utc(record.expire) <= datetime.now(UTC):
                db.delete(record)
                db.commit()
                return None
            return dict(record.sess)

    def save(self, sid: str, data: dict) -> datetime:
        expire = datetime.now(UTC) + self.max_age
        with Session(self.engine) as db:
            record = db.get(SessionRecord, sid)
            if record is None:
                record = SessionRecord(sid=sid, sess=data, expire=expire)
            else:
                # Last write wins for concurrent logins on one session.
                record.sess = data
                record.expire = expire
            db.add(record)
            db.commit()
        return expire

    def destroy(self, sid: str) -> None:
        with Session(self.engine) as db:
            record = db.get(SessionRecord, sid)
            if record is not None:
                db.delete(record)
                db.commit()

    def prune(self) -> int:
        with Session(self.engine) as db:
            expired = db.exec(
                select(SessionRecord).where(SessionRecord.expire <= datetime.now(UTC))
            ).all()
            for record in expired:
                db.delete(record)
            db.commit()
        return len(expired)


class ServerSession(dict):
    """Per-request view of the session data that records what changed."""

    def __init__(self, sid: str | None = None, data: dict | None = None):
        super().__init__(data or {})
        self.sid = sid
        self.stale_sid: str | None = None
        self.modified = False
        self.destroyed = False

    def __setitem__(self, key, value):
        super().__setitem__(key, value)
        self.modified = True

    def __delitem__(self, key):
        super().__delitem__(key)
        self.modified = True

    def regenerate(self) -> None:
        """Issue a fresh id on the next save and retire the current one."""
        if self.sid is not None:
            self.stale_sid = self.sid
        self.sid = None
        self.modified = True

    def destroy(self) -> None:
        self.clear()
        self.destroyed = True


class SessionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, store: SessionStore, settings: Settings):
        super().__init__(app)
        self.store = store
        self.settings = settings

    async def dispatch(self, request: Request, call_next):
        sid = None
        cookie = request.cookies.get(self.settings.session_cookie_name)
        if cookie:
            sid = unsign_session_id(cookie, self.settings.session_secret)
            if sid is None:
                logger.warning("Ignoring session cookie with a bad signature")

        data = await run_in_threadpool(self.store.load, sid) if sid else None
        session = ServerSession(sid if data is not None else None, data)
        request.state.session = session

        response = await call_next(request)

        if session.destroyed:
            for stale in {sid, session.sid, session.stale_sid} - {None}:
                await run_in_threadpool(self.store.destroy, stale)
            response.delete_cookie(self.settings.session_cookie_name, path="/")
        elif session.modified:
            if session.stale_sid is not None:
                await run_in_threadpool(self.store.destroy, session.stale_sid)
            if session.sid is None:
                session.sid = self.store.new_id()
            await run_in_threadpool(self.store.save, session.sid, dict(session))
            response.set_cookie(
                self.settings.session_cookie_name,
                sign_session_id(session.sid, self.settings.session_secret),
                max_age=int(self.store.max_age.total_seconds()),
                path="/",
                httponly=True,
                samesite="lax",
                secure=self.settings.is_production,
            )
        return response
