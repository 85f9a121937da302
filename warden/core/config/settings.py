"""Main application settings and configuration management.

This module composes the settings from the different modules (app, database,
auth, email) into a single `Settings` class and exposes one `settings`
instance for use throughout the package.

Environment Support:
- Development: Uses .env, email test mode enabled
- Test: Uses .env.test, email test mode enabled
- Staging: Uses .env.staging, SMTP credentials required
- Production: Uses .env.production, SMTP credentials required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .email import EmailSettings

logger = logging.getLogger(__name__)
logging.getLogger("passlib").setLevel(logging.ERROR)


class Settings(AppSettings, DatabaseSettings, AuthSettings, EmailSettings):
    """The settings class that aggregates every configuration section.

    Security Note:
        - Sensitive fields (database and SMTP passwords) are SecretStr values and
          are never logged (OWASP A02:2021 - Cryptographic Failures).
    Usage:
        - Access settings via the singleton instance `settings`.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def __init__(self, **kwargs):
        """Initialize settings with environment-specific configuration."""
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Args:
            env: Environment name
        """
        if env in ("development", "test"):
            self.EMAIL_TEST_MODE = True
            logger.info("Email test mode enabled for %s environment", env)

        logger.info("Application running in %s environment", env)


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info("Loading environment configuration from %s", env_file)
        return Settings(_env_file=env_file)

    if not Path(".env").exists():
        logger.warning("No .env file found, using environment variables only (environment: %s)", env)
    return Settings()


settings = create_settings()
