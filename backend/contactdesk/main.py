import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select
from starlette.routing import Match

from contactdesk.api.admin import router as admin_router
from contactdesk.api.contact import router as contact_router
from contactdesk.api.health import router as health_router
from contactdesk.auth import hash_password
from contactdesk.config import Settings
from contactdesk.context import AppContext
from contactdesk.database import init_db, init_session_table
from contactdesk.errors import register_exception_handlers
from contactdesk.models.user import AdminUser
from contactdesk.sessions import SessionMiddleware

logger = logging.getLogger(__name__)

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def ensure_default_admin(engine: Engine, username: str, password: str) -> bool:
    """Create the bootstrap admin unless one with ``username`` already exists.

    Returns True when a row was inserted. Safe to call on every startup; the
    unique constraint on ``users.username`` settles races between processes.
    """
    with Session(engine) as session:
        admin = session.exec(select(AdminUser).where(AdminUser.username == username)).first()
        if admin:
            return False
        session.add(
            AdminUser(
                username=username,
                password_hash=hash_password(password),
                role="admin",
            )
        )
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            return False
    logger.info(f"Created default admin user {username!r}")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    context: AppContext = app.state.context
    settings = context.settings

    init_db(context.engine)
    if context.has_separate_session_db:
        init_session_table(context.session_engine)

    pruned = context.sessions.prune()
    if pruned:
        logger.info(f"Pruned {pruned} expired sessions")

    try:
        ensure_default_admin(
            context.engine,
            settings.default_admin_username,
            settings.default_admin_password,
        )
    except (SQLAlchemyError, ValueError):
        # ValueError: bcrypt rejects passwords over 72 bytes.
        logger.exception("Default admin bootstrap failed")
    yield
    context.dispose()


def mount_frontend(app: FastAPI, frontend_dist: Path) -> None:
    if not frontend_dist.exists():
        return
    assets = frontend_dist / "assets"
    if assets.is_dir():
        app.mount("/assets", StaticFiles(directory=str(assets)), name="assets")

    @app.api_route("/api/{full_path:path}", methods=_ALL_METHODS, include_in_schema=False)
    async def api_not_found(request: Request, full_path: str):
        # Unknown API paths are 404 for every method; known ones keep their 405.
        for route in request.app.router.routes:
            if (
                isinstance(route, APIRoute)
                and route.path.startswith("/api/")
                and route.path != "/api/{full_path:path}"
                and route.matches(request.scope)[0] == Match.PARTIAL
            ):
                raise HTTPException(status_code=405, detail="Method Not Allowed")
        raise HTTPException(status_code=404, detail="Not Found")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_spa(request: Request, full_path: str):
        """Serve the marketing site; unknown non-API paths return index.html."""
        if full_path == "api":
            raise HTTPException(status_code=404, detail="Not Found")
        file_path = (frontend_dist / full_path).resolve()
        if file_path.is_file() and file_path.is_relative_to(frontend_dist.resolve()):
            return FileResponse(str(file_path))
        return FileResponse(str(frontend_dist / "index.html"))


def create_app(settings: Settings | None = None) -> FastAPI:
    # Missing DATABASE_URL or SESSION_SECRET raises here, before anything is served.
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Contactdesk", version="0.1.0", lifespan=lifespan)
    app.state.context = AppContext.from_settings(settings)

    # Installed once here; routers rely on it and never add their own.
    app.add_middleware(
        SessionMiddleware, store=app.state.context.sessions, settings=settings
    )
    register_exception_handlers(app)

    app.include_router(admin_router, prefix="/api")
    app.include_router(contact_router, prefix="/api")
    app.include_router(health_router, prefix="/api")

    mount_frontend(app, settings.frontend_dist)
    return app
