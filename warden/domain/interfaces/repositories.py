"""Repository interfaces for abstracting data persistence in the domain layer.

These abstract base classes are the ports the domain uses to reach storage.
Concrete adapters live in `warden.infrastructure.repositories`: one backed by
SQLAlchemy and one in-memory substitute used by the test suite.
"""

from abc import ABC, abstractmethod

from warden.domain.entities.token import Token, TokenMatch, TokenScope
from warden.domain.entities.user import User


class IUserRepository(ABC):
    """Contract for account persistence with optimistic concurrency control."""

    @abstractmethod
    async def insert(self, user: User) -> User:
        """Persists a new user.

        On success the store-assigned `id`, `created_at` and `version` (1) are
        written back onto `user`, which is also returned.

        Raises:
            ValidationError: If name or email are invalid.
            PasswordDigestMissingError: If the user has no password digest.
            DuplicateEmailError: If the email is already registered.
            DeadlineExceededError: If the store does not answer in time.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(self, email: str) -> User:
        """Retrieves a user by email address.

        Raises:
            RecordNotFoundError: If no user has this address.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User:
        """Retrieves a user by identifier.

        Raises:
            RecordNotFoundError: If no user has this id.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, user: User) -> User:
        """Writes `user` if its `version` is still the stored one.

        The stored version is incremented by exactly one and copied back onto
        `user`. No lock is held between the caller's read and this write.

        Raises:
            EditConflictError: If another writer already advanced the version.
            DuplicateEmailError: If the new email belongs to another user.
        """
        raise NotImplementedError


class ITokenRepository(ABC):
    """Contract for token persistence. Only digests are ever stored."""

    @abstractmethod
    async def insert(self, token: Token) -> None:
        """Persists the digest, owner, expiry and scope of `token`."""
        raise NotImplementedError

    @abstractmethod
    async def delete_all_for_user(self, scope: TokenScope, user_id: int) -> None:
        """Removes every token of `scope` owned by `user_id`. Idempotent."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_digest(self, digest: bytes, scope: TokenScope) -> TokenMatch:
        """Looks up a non-expired token by digest and scope.

        Raises:
            RecordNotFoundError: For any miss, whatever the reason.
        """
        raise NotImplementedError
