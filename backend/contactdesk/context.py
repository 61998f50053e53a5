from dataclasses import dataclass
from datetime import timedelta

from fastapi import Request
from sqlalchemy.engine import Engine

from contactdesk.config import Settings
from contactdesk.database import build_engine
from contactdesk.sessions import SessionStore


@dataclass
class AppContext:
    """Process-wide state built once by ``create_app`` and kept on ``app.state``."""

    settings: Settings
    engine: Engine
    session_engine: Engine
    sessions: SessionStore

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings.database_url)
        if settings.session_db_url and settings.session_db_url != settings.database_url:
            session_engine = build_engine(settings.session_db_url)
        else:
            session_engine = engine
        sessions = SessionStore(
            session_engine, timedelta(days=settings.session_max_age_days)
        )
        return cls(
            settings=settings,
            engine=engine,
            session_engine=session_engine,
            sessions=sessions,
        )

    @property
    def has_separate_session_db(self) -> bool:
        return self.session_engine is not self.engine

    def dispose(self) -> None:
        self.engine.dispose()
        if self.has_separate_session_db:
            self.session_engine.dispose()


def get_context(request: Request) -> AppContext:
    return request.app.state.context
