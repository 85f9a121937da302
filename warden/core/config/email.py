"""Email configuration settings.

This module defines the SMTP transport, sender identity and delivery policy
used by the mailer for account lifecycle notifications.
"""

from typing import Optional

from pydantic import EmailStr, Field, SecretStr
from pydantic_settings import BaseSettings


class EmailSettings(BaseSettings):
    """Email configuration settings with secure defaults and validation.

    Security considerations:
    - SMTP credentials are handled as SecretStr to prevent logging
    - TLS is enforced by default for security

    Attributes:
        SMTP_HOST: SMTP server hostname
        SMTP_PORT: SMTP server port (587 for STARTTLS, 465 for implicit TLS)
        SMTP_USERNAME: SMTP authentication username
        SMTP_PASSWORD: SMTP authentication password (SecretStr)
        SMTP_USE_TLS: Upgrade the connection with STARTTLS
        SMTP_USE_SSL: Connect with implicit TLS (alternative to STARTTLS)
        SMTP_TIMEOUT_SECONDS: Connect/send timeout for a single attempt
        FROM_EMAIL: Sender email address
        FROM_NAME: Sender display name
        EMAIL_SEND_ATTEMPTS: Total delivery attempts per message
        EMAIL_RETRY_DELAY_SECONDS: Fixed wait between delivery attempts
        EMAIL_STRICT_DELIVERY: Raise once every attempt has failed
        EMAIL_TEST_MODE: Log messages instead of sending them. The composed
            `Settings` forces this on when APP_ENV is development or test,
            whatever the environment says, so real delivery needs APP_ENV
            staging or production.
    """

    SMTP_HOST: str = Field(
        default="localhost",
        description="SMTP server hostname"
    )
    SMTP_PORT: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port (587 for STARTTLS, 465 for implicit TLS)"
    )
    SMTP_USERNAME: Optional[str] = Field(
        default=None,
        description="SMTP authentication username"
    )
    SMTP_PASSWORD: Optional[SecretStr] = Field(
        default=None,
        description="SMTP authentication password"
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Upgrade the connection with STARTTLS (recommended for production)"
    )
    SMTP_USE_SSL: bool = Field(
        default=False,
        description="Connect with implicit TLS (alternative to STARTTLS)"
    )
    SMTP_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        description="Timeout applied to each connection attempt"
    )

    FROM_EMAIL: EmailStr = Field(
        default="noreply@example.com",
        description="Sender email address"
    )
    FROM_NAME: str = Field(
        default="Warden",
        description="Sender display name"
    )

    EMAIL_SEND_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total delivery attempts per message"
    )
    EMAIL_RETRY_DELAY_SECONDS: float = Field(
        default=0.5,
        ge=0,
        description="Fixed wait between delivery attempts"
    )
    EMAIL_STRICT_DELIVERY: bool = Field(
        default=False,
        description="Raise EmailDeliveryError once every attempt has failed"
    )
    EMAIL_TEST_MODE: bool = Field(
        default=False,
        description="Enable test mode (emails logged instead of sent); always on in development and test"
    )

    def validate_smtp_config(self) -> None:
        """Validate SMTP configuration for production use.

        Raises:
            ValueError: If SMTP configuration is invalid or insecure
        """
        if self.EMAIL_TEST_MODE or getattr(self, "APP_ENV", "development") not in {"production", "staging"}:
            return

        if not self.SMTP_USERNAME or not self.SMTP_PASSWORD:
            raise ValueError(
                "SMTP_USERNAME and SMTP_PASSWORD are required in production"
            )

        if not (self.SMTP_USE_TLS or self.SMTP_USE_SSL):
            raise ValueError(
                "Either SMTP_USE_TLS or SMTP_USE_SSL must be enabled for security"
            )

        if self.SMTP_USE_TLS and self.SMTP_USE_SSL:
            raise ValueError(
                "Cannot enable both SMTP_USE_TLS and SMTP_USE_SSL simultaneously"
            )
