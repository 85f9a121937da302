"""Opaque bearer tokens.

A token's plaintext is 16 bytes from the OS CSPRNG encoded as unpadded
base-32 (26 characters). Only its SHA-256 digest is stored, so the plaintext
is handed out exactly once, at issuance, and cannot be recovered afterwards.
"""

import base64
import hashlib
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from warden.core.exceptions import GenerationError
from warden.domain.validation import Validator

logger = structlog.get_logger(__name__)

TOKEN_ENTROPY_BYTES = 16
TOKEN_PLAINTEXT_LENGTH = 26
TOKEN_PLAINTEXT_PATTERN = re.compile(r"^[A-Z2-7]{26}$")


class TokenScope(str, Enum):
    """Purpose of a token. A user may hold valid tokens in several scopes at once."""

    ACTIVATION = "activation"
    AUTHENTICATION = "authentication"


@dataclass(frozen=True)
class Token:
    """An issued token.

    Tokens are never updated: they are inserted once and later deleted.

    Attributes:
        plaintext: The secret handed to the user. Only set on the instance
            returned at issuance; empty for anything read back from a store.
        hash: SHA-256 digest of the plaintext, the only persisted form.
        user_id: Owner of the token.
        expiry: Moment after which the token no longer matches.
        scope: Purpose tag.
    """

    hash: bytes
    user_id: int
    expiry: datetime
    scope: TokenScope
    plaintext: str = ""

    @classmethod
    def generate(cls, user_id: int, ttl: timedelta, scope: TokenScope) -> "Token":
        """Create a new token without persisting it.

        Raises:
            GenerationError: If the random source fails.
        """
        try:
            random_bytes = secrets.token_bytes(TOKEN_ENTROPY_BYTES)
        except (OSError, NotImplementedError) as e:
            logger.critical(
                "Secure random source failed during token generation",
                user_id=user_id,
                scope=TokenScope(scope).value,
                error_type=type(e).__name__,
            )
            raise GenerationError() from e

        plaintext = base64.b32encode(random_bytes).decode("ascii").rstrip("=")
        return cls(
            hash=hash_token_plaintext(plaintext),
            user_id=user_id,
            expiry=datetime.now(timezone.utc) + ttl,
            scope=TokenScope(scope),
            plaintext=plaintext,
        )

    def to_view(self) -> "TokenView":
        return TokenView(token=self.plaintext, expiry=self.expiry)

    def __repr__(self) -> str:
        return (
            f"Token(user_id={self.user_id}, scope={self.scope.value!r}, "
            f"expiry={self.expiry.isoformat()}, hash_prefix={self.hash[:4].hex()!r})"
        )


class TokenView(BaseModel):
    """What the caller delivers to the user: the plaintext and its expiry."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=TOKEN_PLAINTEXT_LENGTH, max_length=TOKEN_PLAINTEXT_LENGTH)
    expiry: datetime


@dataclass(frozen=True)
class TokenMatch:
    """Result of a successful digest lookup."""

    user_id: int
    expiry: datetime


def hash_token_plaintext(plaintext: str) -> bytes:
    """Return the 32-byte SHA-256 digest used as a token's storage form."""
    return hashlib.sha256(plaintext.encode("utf-8")).digest()


def validate_token_plaintext(v: Validator, plaintext: Optional[str]) -> None:
    v.check(bool(plaintext), "token", "must be provided")
    v.check(len(plaintext or "") == TOKEN_PLAINTEXT_LENGTH, "token", f"must be {TOKEN_PLAINTEXT_LENGTH} bytes long")
    v.check(bool(TOKEN_PLAINTEXT_PATTERN.match(plaintext or "")), "token", "must only contain base-32 characters")
