"""Password hashing and bearer token settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class AuthSettings(BaseSettings):
    """Defines settings for password digests and opaque token lifetimes.

    Security Note:
        - BCRYPT_WORK_FACTOR is deliberately expensive. Lowering it weakens every
          digest written afterwards; existing digests keep their own cost.
    """

    BCRYPT_WORK_FACTOR: int = Field(ge=10, le=16, default=12)

    ACTIVATION_TOKEN_TTL_HOURS: int = Field(ge=1, default=72)
    AUTHENTICATION_TOKEN_TTL_HOURS: int = Field(ge=1, default=24)
