"""Field validation with collected errors.

A `Validator` records every failed check under its field name instead of
stopping at the first one, so callers can report all problems together.
Only the first message per field is kept.
"""

import re
from typing import Dict

from warden.core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

PASSWORD_MIN_BYTES = 8
PASSWORD_MAX_BYTES = 72


class Validator:
    """Collects field -> message pairs for failed checks."""

    def __init__(self) -> None:
        self.errors: Dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self) -> None:
        """Raise a ValidationError holding every collected failure."""
        if self.errors:
            raise ValidationError(self.errors)


def validate_email(v: Validator, email: str) -> None:
    v.check(email != "", "email", "must be provided")
    v.check(bool(EMAIL_PATTERN.match(email or "")), "email", "must be a valid email address")


def validate_password_plaintext(v: Validator, password: str) -> None:
    # bcrypt only reads the first 72 bytes, so limits are in bytes, not characters
    size = len(password.encode("utf-8"))
    v.check(password != "", "password", "must be provided")
    v.check(size >= PASSWORD_MIN_BYTES, "password", f"must be at least {PASSWORD_MIN_BYTES} bytes long")
    v.check(size <= PASSWORD_MAX_BYTES, "password", f"must not be more than {PASSWORD_MAX_BYTES} bytes long")
    v.check("\x00" not in password, "password", "must not contain NUL characters")
