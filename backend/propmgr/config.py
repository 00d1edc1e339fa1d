from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

BACKEND_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Database bootstrap configuration using environment variables."""

    # Application
    APP_NAME: str = "Property Manager"
    DEBUG: bool = False  # Echo SQL through SQLAlchemy
    LOG_LEVEL: str = "INFO"

    # MySQL server (no database name: bootstrap runs at server scope)
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_CONNECT_TIMEOUT: int = 10
    DATABASE_URL: Optional[str] = None  # Overrides the DB_* parts when set

    # SQL scripts
    DATABASE_DIR: Path = BACKEND_DIR / "database"
    INIT_FILE: str = "init.sql"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
