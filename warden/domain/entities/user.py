"""User aggregate and its public view."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from warden.core.exceptions import PasswordDigestMissingError
from warden.domain.validation import Validator, validate_email, validate_password_plaintext
from warden.domain.value_objects.password import PasswordSecret

NAME_MAX_BYTES = 500


@dataclass
class User:
    """Represents an account record.

    `id`, `created_at` and `version` are assigned by the store on insert.
    `version` increases by exactly one on every successful update and is the
    value an update is conditioned on.

    An instance belongs to the unit of work that loaded it; concurrent writers
    must each load their own copy.
    """

    name: str
    email: str
    password: PasswordSecret = field(default_factory=PasswordSecret)
    activated: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    version: int = 0

    def to_view(self) -> "UserView":
        return UserView(
            id=self.id,
            created_at=self.created_at,
            name=self.name,
            email=self.email,
            activated=self.activated,
        )


class UserView(BaseModel):
    """Serializable user representation without any password material."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int]
    created_at: Optional[datetime]
    name: str
    email: str
    activated: bool


def validate_user(v: Validator, user: User) -> None:
    """Check a user before it is written.

    Name, email and (when still held in memory) the plaintext password are
    recorded on `v`. A missing digest is a defect in the calling code, so it
    raises instead of being recorded.

    Raises:
        PasswordDigestMissingError: If no password digest has been set.
    """
    v.check(user.name != "", "name", "must be provided")
    v.check(len(user.name.encode("utf-8")) <= NAME_MAX_BYTES, "name", f"must not be more than {NAME_MAX_BYTES} bytes long")

    validate_email(v, user.email)

    if user.password.plaintext is not None:
        validate_password_plaintext(v, user.password.plaintext)

    if user.password.hash is None:
        raise PasswordDigestMissingError()
