"""Configuration management for csvbridge."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


def _parse_optional_int(name: str) -> Optional[int]:
    """Parse an optional integer environment variable (unset or empty means None)."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


class Settings(BaseModel):
    """Application settings."""

    # Remote import service (schema discovery, alias tables, record creation)
    import_service_url: str = os.getenv("IMPORT_SERVICE_URL", "http://127.0.0.1:9000/api")
    import_service_token: Optional[str] = os.getenv("IMPORT_SERVICE_TOKEN")
    import_service_timeout: float = float(os.getenv("IMPORT_SERVICE_TIMEOUT", "60.0"))

    # Upload constraints
    max_file_size: int = int(os.getenv("MAX_FILE_SIZE", "10485760"))  # 10 MiB
    default_max_records: Optional[int] = _parse_optional_int("DEFAULT_MAX_RECORDS")

    # Idle wizard sessions are dropped after this many seconds
    session_ttl: int = int(os.getenv("SESSION_TTL", "3600"))

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()


settings = Settings()
