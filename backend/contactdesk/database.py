from collections.abc import Generator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # Requests run on worker threads, so SQLite connections must be shareable.
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in _MEMORY_URLS:
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(url, echo=False, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    import contactdesk.models  # noqa: F401  register all models with SQLModel metadata

    SQLModel.metadata.create_all(engine)


def init_session_table(engine: Engine) -> None:
    from contactdesk.models.session import SessionRecord

    SQLModel.metadata.create_all(engine, tables=[SessionRecord.__table__])


def get_session(request: Request) -> Generator[Session, None, None]:
    with Session(request.app.state.context.engine) as session:
        yield session
