"""Security utilities for password hashing and verification.

Password digests use bcrypt through passlib with the configured work factor.
"""

from passlib.context import CryptContext

from warden.core.config.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_WORK_FACTOR,
)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        str: Bcrypt digest in modular crypt format (``$2b$12$...``)
    """
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against its digest.

    Args:
        password: Plain text password to verify
        hashed_password: Bcrypt digest to verify against

    Returns:
        bool: True if password matches the digest

    Raises:
        ValueError: If the digest is not a well-formed bcrypt hash
    """
    return pwd_context.verify(password, hashed_password)
