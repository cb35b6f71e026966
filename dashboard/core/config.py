"""
Dashboard Configuration

Every knob of the dashboard comes from the environment (or a local .env file)
through Pydantic Settings. ENV_MODE picks the service wiring:
    - development: mock restaurant backend over httpx.MockTransport,
      in-process cache, eager Celery
    - staging / production: real restaurant REST API, Redis cache and broker

Usage:
    from dashboard.core.config import get_settings

    if get_settings().is_development:
        ...

Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_LANGUAGES = ("ru", "en")


class EnvironmentMode(str, Enum):
    """Where the dashboard runs and which backend it talks to."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Dashboard settings.

    Attributes:
        env_mode: development / staging / production
        debug: Verbose logs and exception details in 500 responses

        api_host, api_port: Where uvicorn binds the dashboard

        backend_api_url: Base URL of the restaurant REST API (no trailing slash)
        backend_timeout_seconds: Timeout for one backend call
        mock_min_latency, mock_max_latency: Artificial delay of the mock backend

        redis_url: Cache, session store and Celery broker
        session_cookie_name, session_ttl_seconds: Dashboard session cookie
        query_stale_seconds: Freshness window of cached screen data

        chat_sessions_poll_seconds, chat_messages_poll_seconds: Stream intervals
        default_language: ru or en for new sessions
        data_directory, excel_lock_timeout: Reservation exports
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = EnvironmentMode.DEVELOPMENT
    debug: bool = False

    # ==========================================================================
    # DASHBOARD SERVER
    # ==========================================================================

    app_name: str = "Restaurant Dashboard"
    app_version: str = "1.0.0"
    api_host: str = Field(default="0.0.0.0", description="Bind address for uvicorn")
    api_port: int = Field(default=3000, description="Bind port for uvicorn")

    # ==========================================================================
    # RESTAURANT BACKEND
    # ==========================================================================

    backend_api_url: str = Field(
        default="http://localhost:4000",
        description="Base URL of the restaurant REST API"
    )
    backend_timeout_seconds: float = Field(default=15.0, gt=0)
    mock_min_latency: float = Field(default=0.0, ge=0)
    mock_max_latency: float = Field(default=0.0, ge=0)

    # ==========================================================================
    # SESSIONS AND CACHE
    # ==========================================================================

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis for cached queries, sessions and the Celery broker"
    )
    session_cookie_name: str = "dashboard_session"
    session_ttl_seconds: int = Field(default=7 * 24 * 3600, gt=0)
    query_stale_seconds: float = Field(default=30.0, ge=0)

    # ==========================================================================
    # LIVE UPDATES
    # ==========================================================================

    chat_sessions_poll_seconds: float = Field(default=10.0, gt=0)
    chat_messages_poll_seconds: float = Field(default=5.0, gt=0)

    # ==========================================================================
    # LANGUAGE AND EXPORTS
    # ==========================================================================

    default_language: str = "ru"
    data_directory: str = Field(default="data", description="Where reservation workbooks are written")
    excel_lock_timeout: int = Field(default=30, description="Seconds to wait for a workbook lock")

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def parse_env_mode(cls, v):
        if isinstance(v, str):
            try:
                return EnvironmentMode(v.strip().lower())
            except ValueError:
                choices = ", ".join(mode.value for mode in EnvironmentMode)
                raise ValueError(f"ENV_MODE must be one of: {choices}")
        return v

    @field_validator("default_language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        v = v.lower()
        if v not in SUPPORTED_LANGUAGES:
            raise ValueError("default_language must be 'ru' or 'en'")
        return v

    @field_validator("backend_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ==========================================================================
    # DERIVED FLAGS
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        return self.env_mode is EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Secure cookies are only set in production."""
        return self.env_mode is EnvironmentMode.PRODUCTION

    @property
    def use_real_services(self) -> bool:
        """Staging and production talk to the real backend and Redis."""
        return not self.is_development

    def validate_production_config(self) -> list[str]:
        """Names of settings that look unset for a real deployment."""
        problems = []
        if self.use_real_services:
            if not self.backend_api_url or "localhost" in self.backend_api_url:
                problems.append("BACKEND_API_URL")
            if not self.redis_url:
                problems.append("REDIS_URL")
        return problems


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings; tests call ``get_settings.cache_clear()`` after patching the env."""
    return Settings()


# =============================================================================
# LOGGING
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure root logging for the dashboard process.

    Debug mode lowers the level to DEBUG. httpx request lines are kept at
    WARNING so every backend call does not show up in the log.
    """
    if get_settings().debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger("dashboard")
