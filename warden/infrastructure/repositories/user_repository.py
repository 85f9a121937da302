"""User repository backed by SQLAlchemy.

Concurrency control is optimistic: `update` only writes when the row still
carries the version the caller read, and bumps it in the same statement. No
row lock is held between the read and the write, so a conflicting writer is
detected (zero rows affected), not prevented.
"""

from sqlalchemy import insert, select, update
from sqlalchemy.engine import RowMapping
from structlog import get_logger

from warden.core.exceptions import EditConflictError, RecordNotFoundError
from warden.core.logging import mask_email
from warden.domain.entities.user import User, validate_user
from warden.domain.interfaces.repositories import IUserRepository
from warden.domain.validation import Validator
from warden.domain.value_objects.password import PasswordSecret
from warden.infrastructure.database.models import users_table
from warden.infrastructure.repositories.base import SQLRepository

logger = get_logger(__name__)


def _to_user(row: RowMapping) -> User:
    return User(
        id=row["id"],
        created_at=row["created_at"],
        name=row["name"],
        email=row["email"],
        password=PasswordSecret.from_hash(row["password_hash"]),
        activated=row["activated"],
        version=row["version"],
    )


class UserRepository(SQLRepository, IUserRepository):
    """SQLAlchemy implementation of IUserRepository.

    Each method is one unit of work on the injected session: it executes,
    commits, and returns within the repository deadline.
    """

    async def insert(self, user: User) -> User:
        v = Validator()
        validate_user(v, user)
        v.raise_if_invalid()

        statement = (
            insert(users_table)
            .values(
                name=user.name,
                email=user.email,
                password_hash=user.password.hash,
                activated=user.activated,
            )
            .returning(users_table.c.id, users_table.c.created_at, users_table.c.version)
        )

        async def work():
            result = await self.db_session.execute(statement)
            row = result.mappings().one()
            await self.db_session.commit()
            return row

        row = await self._run("insert_user", work)
        user.id = row["id"]
        user.created_at = row["created_at"]
        user.version = row["version"]

        logger.info(
            "User inserted",
            user_id=user.id,
            email=mask_email(user.email),
            version=user.version,
        )
        return user

    async def get_by_email(self, email: str) -> User:
        statement = select(users_table).where(users_table.c.email == email)
        row = await self._fetch_one("get_user_by_email", statement)
        if row is None:
            logger.debug("User lookup by email missed", email=mask_email(email))
            raise RecordNotFoundError()
        return _to_user(row)

    async def get_by_id(self, user_id: int) -> User:
        statement = select(users_table).where(users_table.c.id == user_id)
        row = await self._fetch_one("get_user_by_id", statement)
        if row is None:
            logger.debug("User lookup by id missed", user_id=user_id)
            raise RecordNotFoundError()
        return _to_user(row)

    async def update(self, user: User) -> User:
        v = Validator()
        validate_user(v, user)
        v.raise_if_invalid()

        statement = (
            update(users_table)
            .where(users_table.c.id == user.id, users_table.c.version == user.version)
            .values(
                name=user.name,
                email=user.email,
                password_hash=user.password.hash,
                activated=user.activated,
                version=users_table.c.version + 1,
            )
            .returning(users_table.c.version)
        )

        async def work():
            result = await self.db_session.execute(statement)
            new_version = result.scalar_one_or_none()
            await self.db_session.commit()
            return new_version

        new_version = await self._run("update_user", work)
        if new_version is None:
            logger.warning(
                "Edit conflict on user update",
                user_id=user.id,
                expected_version=user.version,
            )
            raise EditConflictError()

        user.version = new_version
        logger.info("User updated", user_id=user.id, version=user.version)
        return user

    async def _fetch_one(self, operation: str, statement) -> RowMapping | None:
        async def work():
            result = await self.db_session.execute(statement)
            row = result.mappings().first()
            await self.db_session.commit()
            return row

        return await self._run(operation, work)
