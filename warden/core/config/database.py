"""
Database connection settings.
"""
import logging

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class DatabaseSettings(BaseSettings):
    """
    Defines settings for connecting to the PostgreSQL database.

    Security Note:
        - POSTGRES_PASSWORD must be securely stored and never logged or exposed
          in version control (OWASP A02:2021 - Cryptographic Failures).
    Performance Note:
        - DB_QUERY_TIMEOUT_SECONDS bounds every store call. A call that runs
          past it is abandoned and reported as a deadline failure, so it should
          stay well below any upstream request timeout.
    """
    POSTGRES_USER: str = "warden"
    POSTGRES_PASSWORD: SecretStr = SecretStr("warden")
    POSTGRES_DB: str = "warden"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = Field(ge=1, le=65535, default=5432)
    DATABASE_URL: str = ""
    DB_QUERY_TIMEOUT_SECONDS: float = Field(gt=0, default=3.0)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_url(cls, v: str | None, info: ValidationInfo) -> str:
        """
        Assembles the asyncpg connection URL if not provided explicitly.

        Args:
            v: Explicitly provided URL or None.
            info: Validation context with other field values.

        Returns:
            Assembled or provided database URL.
        """
        if v:
            return v

        values = info.data
        password = values.get("POSTGRES_PASSWORD")
        if not password:
            logger.warning("POSTGRES_PASSWORD not set during DATABASE_URL assembly.")
            raw_password = ""
        else:
            raw_password = password.get_secret_value()

        url = (
            f"postgresql+asyncpg://{values.get('POSTGRES_USER')}:"
            f"{raw_password}@{values.get('POSTGRES_HOST')}:"
            f"{values.get('POSTGRES_PORT')}/{values.get('POSTGRES_DB')}"
        )
        logger.debug("Assembled DATABASE_URL (password masked for security).")
        return url
