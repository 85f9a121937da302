"""Token repository backed by SQLAlchemy.

Expired rows are never purged here; `find_by_digest` filters them out at
read time.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, insert, select
from structlog import get_logger

from warden.core.exceptions import RecordNotFoundError
from warden.domain.entities.token import Token, TokenMatch, TokenScope
from warden.domain.interfaces.repositories import ITokenRepository
from warden.infrastructure.database.models import tokens_table
from warden.infrastructure.repositories.base import SQLRepository

logger = get_logger(__name__)


class TokenRepository(SQLRepository, ITokenRepository):
    """SQLAlchemy implementation of ITokenRepository."""

    async def insert(self, token: Token) -> None:
        statement = insert(tokens_table).values(
            hash=token.hash,
            user_id=token.user_id,
            expiry=token.expiry,
            scope=TokenScope(token.scope).value,
        )

        async def work():
            await self.db_session.execute(statement)
            await self.db_session.commit()

        await self._run("insert_token", work)
        logger.debug("Token stored", user_id=token.user_id, scope=TokenScope(token.scope).value)

    async def delete_all_for_user(self, scope: TokenScope, user_id: int) -> None:
        statement = delete(tokens_table).where(
            tokens_table.c.scope == TokenScope(scope).value,
            tokens_table.c.user_id == user_id,
        )

        async def work():
            result = await self.db_session.execute(statement)
            await self.db_session.commit()
            return result.rowcount

        removed = await self._run("delete_tokens_for_user", work)
        logger.debug("Tokens deleted", user_id=user_id, scope=TokenScope(scope).value, removed=removed)

    async def find_by_digest(self, digest: bytes, scope: TokenScope) -> TokenMatch:
        statement = select(tokens_table.c.user_id, tokens_table.c.expiry).where(
            tokens_table.c.hash == digest,
            tokens_table.c.scope == TokenScope(scope).value,
            tokens_table.c.expiry > datetime.now(timezone.utc),
        )

        async def work():
            result = await self.db_session.execute(statement)
            row = result.mappings().first()
            await self.db_session.commit()
            return row

        row = await self._run("find_token_by_digest", work)
        if row is None:
            raise RecordNotFoundError()
        return TokenMatch(user_id=row["user_id"], expiry=row["expiry"])
