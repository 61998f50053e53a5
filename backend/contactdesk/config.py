from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

_DEFAULT_FRONTEND_DIST = Path(__file__).resolve().parent.parent.parent / "frontend" / "dist"


class Settings(BaseSettings):
    database_url: str = Field(min_length=1)
    session_secret: str = Field(min_length=1)
    session_db_url: str | None = None
    environment: str = "development"
    session_cookie_name: str = "connect.sid"
    session_max_age_days: int = 7
    default_admin_username: str = "admin"
    default_admin_password: str = "admin123"
    frontend_dist: Path = _DEFAULT_FRONTEND_DIST
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"
