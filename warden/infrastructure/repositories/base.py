"""Shared plumbing for the SQLAlchemy repositories.

Every store call runs as one unit of work: execute, commit, and return, all
within the repository's deadline. Driver errors are logged here and replaced
with application errors, so no driver text escapes the store boundary.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from warden.core.config.settings import settings
from warden.core.exceptions import DatabaseError, DeadlineExceededError, DuplicateEmailError
from warden.infrastructure.database.models import USERS_EMAIL_CONSTRAINT

logger = get_logger(__name__)

T = TypeVar("T")


def constraint_name(error: IntegrityError) -> Optional[str]:
    """Return the name of the violated constraint reported by the driver.

    psycopg exposes it on ``orig.diag``; asyncpg errors arrive wrapped by
    SQLAlchemy's adapter with the native exception as ``__cause__``.
    """
    orig = error.orig
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name

    for candidate in (getattr(orig, "__cause__", None), orig):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
    return None


class SQLRepository:
    """Base for repositories that own an `AsyncSession` and a deadline.

    Attributes:
        db_session: Session for the caller's unit of work.
        timeout: Seconds each store call may take before it is abandoned.
    """

    def __init__(self, db_session: AsyncSession, timeout: Optional[float] = None):
        self.db_session = db_session
        self.timeout = timeout if timeout is not None else settings.DB_QUERY_TIMEOUT_SECONDS

    async def _run(self, operation: str, work: Callable[[], Awaitable[T]]) -> T:
        """Run `work` under the deadline and translate storage failures.

        Raises:
            DeadlineExceededError: If `work` does not finish in time.
            DuplicateEmailError: If the users email constraint is violated.
            DatabaseError: For any other driver failure.
        """
        try:
            return await asyncio.wait_for(work(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._rollback(operation)
            logger.warning("Store operation exceeded deadline", operation=operation, timeout=self.timeout)
            raise DeadlineExceededError() from None
        except IntegrityError as e:
            await self._rollback(operation)
            if constraint_name(e) == USERS_EMAIL_CONSTRAINT:
                logger.info("Duplicate email rejected", operation=operation)
                raise DuplicateEmailError() from None
            logger.error(
                "Integrity error in store operation",
                operation=operation,
                constraint=constraint_name(e),
                error=str(e.orig),
            )
            raise DatabaseError() from None
        except SQLAlchemyError as e:
            await self._rollback(operation)
            logger.error(
                "Store operation failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DatabaseError() from None

    async def _rollback(self, operation: str) -> None:
        try:
            await self.db_session.rollback()
        except SQLAlchemyError as e:
            logger.error("Rollback failed", operation=operation, error_type=type(e).__name__)
