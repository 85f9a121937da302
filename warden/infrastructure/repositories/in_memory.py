"""In-memory repositories.

Drop-in substitutes for the SQL repositories, used by the test suite and by
local tooling that has no database. Rows are stored as private snapshots and
every read returns a fresh entity, so callers never share mutable state.

Each write completes without an intervening ``await``; on a single event loop
that makes the version compare-and-swap in `update` atomic without a lock.
"""

import itertools
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, Iterator

from structlog import get_logger

from warden.core.exceptions import DatabaseError, DuplicateEmailError, EditConflictError, RecordNotFoundError
from warden.domain.entities.token import Token, TokenMatch, TokenScope
from warden.domain.entities.user import User, validate_user
from warden.domain.interfaces.repositories import ITokenRepository, IUserRepository
from warden.domain.validation import Validator
from warden.domain.value_objects.password import PasswordSecret

logger = get_logger(__name__)


@dataclass(frozen=True)
class _UserRow:
    id: int
    created_at: datetime
    name: str
    email: str
    password_hash: str
    activated: bool
    version: int

    def to_user(self) -> User:
        return User(
            id=self.id,
            created_at=self.created_at,
            name=self.name,
            email=self.email,
            password=PasswordSecret.from_hash(self.password_hash),
            activated=self.activated,
            version=self.version,
        )


class InMemoryUserRepository(IUserRepository):
    """Dictionary-backed IUserRepository with the same error semantics as SQL."""

    def __init__(self) -> None:
        self._rows: Dict[int, _UserRow] = {}
        self._ids: Iterator[int] = itertools.count(1)

    def __len__(self) -> int:
        return len(self._rows)

    async def insert(self, user: User) -> User:
        v = Validator()
        validate_user(v, user)
        v.raise_if_invalid()

        if self._email_taken(user.email):
            raise DuplicateEmailError()

        row = _UserRow(
            id=next(self._ids),
            created_at=datetime.now(timezone.utc),
            name=user.name,
            email=user.email,
            password_hash=user.password.hash,
            activated=user.activated,
            version=1,
        )
        self._rows[row.id] = row

        user.id = row.id
        user.created_at = row.created_at
        user.version = row.version
        logger.debug("User inserted in memory", user_id=row.id)
        return user

    async def get_by_email(self, email: str) -> User:
        for row in self._rows.values():
            if row.email == email:
                return row.to_user()
        raise RecordNotFoundError()

    async def get_by_id(self, user_id: int) -> User:
        row = self._rows.get(user_id)
        if row is None:
            raise RecordNotFoundError()
        return row.to_user()

    async def update(self, user: User) -> User:
        v = Validator()
        validate_user(v, user)
        v.raise_if_invalid()

        current = self._rows.get(user.id)
        if current is None or current.version != user.version:
            raise EditConflictError()
        if self._email_taken(user.email, exclude_id=user.id):
            raise DuplicateEmailError()

        updated = replace(
            current,
            name=user.name,
            email=user.email,
            password_hash=user.password.hash,
            activated=user.activated,
            version=current.version + 1,
        )
        self._rows[user.id] = updated
        user.version = updated.version
        return user

    def _email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        return any(row.email == email and row.id != exclude_id for row in self._rows.values())


class InMemoryTokenRepository(ITokenRepository):
    """Dictionary-backed ITokenRepository keyed by digest."""

    def __init__(self) -> None:
        self._tokens: Dict[bytes, Token] = {}

    def __len__(self) -> int:
        return len(self._tokens)

    def stored(self) -> list[Token]:
        """Snapshot of every stored record, expired ones included."""
        return list(self._tokens.values())

    async def insert(self, token: Token) -> None:
        if token.hash in self._tokens:
            raise DatabaseError()
        self._tokens[token.hash] = replace(token, plaintext="")

    async def delete_all_for_user(self, scope: TokenScope, user_id: int) -> None:
        scope = TokenScope(scope)
        for digest, token in list(self._tokens.items()):
            if token.scope == scope and token.user_id == user_id:
                del self._tokens[digest]

    async def find_by_digest(self, digest: bytes, scope: TokenScope) -> TokenMatch:
        token = self._tokens.get(digest)
        if token is None or token.scope != TokenScope(scope) or token.expiry <= datetime.now(timezone.utc):
            raise RecordNotFoundError()
        return TokenMatch(user_id=token.user_id, expiry=token.expiry)
