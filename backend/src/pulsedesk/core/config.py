from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# backend/.env (two levels up from backend/src/pulsedesk/core/config.py)
_ENV_FILE = Path(__file__).resolve().parent.parent.parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Remote conversation-log service
    LOG_API_URL: str = "http://localhost:5000"
    LOG_API_TIMEOUT_SECONDS: float = 10.0

    # Reference log store (pulsedesk.logstore.app)
    DATABASE_URL: str = "sqlite+aiosqlite:///./pulsedesk_logs.db"
    LOG_STORE_SEED: bool = False

    # Dashboard
    CLINICIAN_NAME: str = "Dr. Sarah Miller"
    AVATAR_BASE_URL: str = "https://avatars.dicebear.com/api/personas"
    LOAD_ON_STARTUP: bool = True

    # "create" forks a new conversation per prescription, "update" writes in place
    PRESCRIPTION_WRITE_MODE: str = "create"

    # Comma-separated list
    CORS_ORIGINS: Optional[str] = None


settings = Settings()
