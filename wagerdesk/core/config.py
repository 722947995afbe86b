"""
Settings for the Wager Desk API, read from the environment and env files.

`.env` is read first and `.env.{ENVIRONMENT}` (e.g. `.env.production`) is
layered on top; real environment variables win over both.

Production refuses to start without:
- LLM_API_KEY
- DATABASE_URL pointing at a server database (not the SQLite file)
"""
import os
import logging
from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = logging.getLogger(__name__)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# Origins the dashboard front-end is served from during development
DEV_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8001",
    "http://127.0.0.1:8001",
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / f".env.{_ENVIRONMENT}"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    APP_NAME: str = "Wager Desk API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    DATABASE_URL: str = f"sqlite:///{PROJECT_ROOT / 'wagerdesk.db'}"
    SESSION_TTL_HOURS: int = 24 * 7
    DEFAULT_BANKROLL: float = 1000.0

    # slowapi storage: "memory" or "redis"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE: str = "memory"
    REDIS_URL: Optional[str] = None

    # Chat-completion endpoint behind CIS generation and script execution
    LLM_API_KEY: str = ""
    LLM_API_URL: str = "https://apps.abacus.ai/v1/chat/completions"
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_TIMEOUT_SECONDS: float = 60.0
    LLM_MAX_ATTEMPTS: int = 3

    CORS_ORIGINS_STR: str = ""
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """
        Comma-separated CORS_ORIGINS_STR, or the development origins.

        Production never allows a wildcard and falls back to no origins.
        """
        origins = [o.strip() for o in self.CORS_ORIGINS_STR.split(",") if o.strip()]
        if self.is_production():
            if "*" in origins:
                logger.warning("Ignoring wildcard CORS origin in production")
                return []
            return origins
        return origins or list(DEV_CORS_ORIGINS)

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def validate_required_secrets(self) -> List[str]:
        """Names of settings that must be set for this environment but are not."""
        missing = []
        if self.is_production():
            if not self.LLM_API_KEY:
                missing.append("LLM_API_KEY")
            if self.DATABASE_URL.startswith("sqlite"):
                missing.append("DATABASE_URL")
        if self.RATE_LIMIT_ENABLED and self.RATE_LIMIT_STORAGE == "redis" and not self.REDIS_URL:
            missing.append("REDIS_URL")
        return missing


settings = Settings()

_missing = settings.validate_required_secrets()
if _missing and settings.is_production():
    raise ValueError(f"Cannot start in production with missing settings: {', '.join(_missing)}")
