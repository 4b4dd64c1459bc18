# pos_backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, List, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

DEFAULT_SQLITE_URL = "sqlite:///./pos.db"


class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_MINUTES: int = 480

    DATABASE_URL: Optional[str] = None

    # Split connection parameters, used when DATABASE_URL is not set
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: int = 5432
    DB_NAME: Optional[str] = None

    # One-time key required by POST /setup; setup is disabled when empty
    ADMIN_SETUP_KEY: Optional[str] = None

    RATE_LIMIT_MAX_ATTEMPTS: int = 5
    RATE_LIMIT_WINDOW_MINUTES: int = 15

    STORE_NAME: str = "Loja"
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

    @property
    def database_url(self) -> str:
        url = self.DATABASE_URL
        if not url and self.DB_HOST and self.DB_NAME:
            auth = self.DB_USER or ""
            if self.DB_PASSWORD:
                auth = f"{auth}:{self.DB_PASSWORD}"
            if auth:
                auth = f"{auth}@"
            url = f"postgresql://{auth}{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        if not url:
            url = DEFAULT_SQLITE_URL

        # SQLAlchemy requires the postgresql:// scheme (Heroku/Azure hand out postgres://)
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url
