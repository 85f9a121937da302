"""Password secret value object.

A `PasswordSecret` pairs the persisted, one-way bcrypt digest of a password
with the plaintext it was computed from. The plaintext only lives in memory
for as long as the object does (so the new password can still be validated
after hashing); it is never persisted, serialized or logged.
"""

from typing import Optional

import structlog
from passlib.exc import PasswordValueError

from warden.core.exceptions import HashingError
from warden.utils.security import hash_password, verify_password

logger = structlog.get_logger(__name__)


class PasswordSecret:
    """Irreversible password secret.

    Attributes:
        plaintext: The plaintext given to `set`, or None once loaded from storage.
        hash: The bcrypt digest, or None before `set` has been called.
    """

    __slots__ = ("_plaintext", "_hash")

    def __init__(self) -> None:
        self._plaintext: Optional[str] = None
        self._hash: Optional[str] = None

    @classmethod
    def from_hash(cls, digest: Optional[str]) -> "PasswordSecret":
        """Rebuild a secret from a stored digest (no plaintext available)."""
        secret = cls()
        secret._hash = digest
        return secret

    @property
    def plaintext(self) -> Optional[str]:
        return self._plaintext

    @property
    def hash(self) -> Optional[str]:
        return self._hash

    def set(self, plaintext: str) -> None:
        """Compute a salted digest of `plaintext` and keep both forms.

        Callers are expected to have validated the plaintext (8 to 72 bytes)
        with `validate_password_plaintext` beforehand.

        Raises:
            HashingError: If the bcrypt primitive itself fails.
        """
        try:
            digest = hash_password(plaintext)
        except Exception as e:
            logger.critical(
                "Password hashing failed",
                error_type=type(e).__name__,
            )
            raise HashingError() from e

        self._plaintext = plaintext
        self._hash = digest

    def matches(self, candidate: str) -> bool:
        """Check `candidate` against the stored digest in constant time.

        A wrong password is reported as False, never as an error. That
        includes candidates bcrypt cannot take at all, such as ones holding NUL.

        Raises:
            HashingError: If the stored digest is absent or structurally invalid.
        """
        if not self._hash:
            raise HashingError("No password digest to compare against")

        try:
            return verify_password(candidate, self._hash)
        except PasswordValueError:
            return False
        except (ValueError, TypeError) as e:
            logger.error(
                "Stored password digest is malformed",
                error_type=type(e).__name__,
            )
            raise HashingError("Stored password digest is malformed") from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PasswordSecret):
            return NotImplemented
        return self._hash == other._hash

    def __repr__(self) -> str:
        return f"PasswordSecret(hash_set={self._hash is not None})"
