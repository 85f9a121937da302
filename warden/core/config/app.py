"""
Application-wide settings.
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, environment and logging.

    Security Note:
        - Keep LOG_JSON enabled in production so log processors can redact and
          index structured fields instead of parsing free text.
    """
    PROJECT_NAME: str = "warden"
    VERSION: str = "0.1.0"
    APP_ENV: str = Field(
        default="development",
        pattern="^(development|test|staging|production)$",
    )

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
