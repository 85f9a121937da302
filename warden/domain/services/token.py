"""Bearer token issuance and verification."""

from datetime import timedelta
from typing import Optional

from structlog import get_logger

from warden.core.config.settings import settings
from warden.core.exceptions import RecordNotFoundError
from warden.domain.entities.token import (
    Token,
    TokenMatch,
    TokenScope,
    hash_token_plaintext,
    validate_token_plaintext,
)
from warden.domain.entities.user import User
from warden.domain.interfaces.repositories import ITokenRepository
from warden.domain.validation import Validator

logger = get_logger(__name__)


def default_ttl(scope: TokenScope) -> timedelta:
    """Configured lifetime for tokens of `scope`."""
    if TokenScope(scope) is TokenScope.ACTIVATION:
        return timedelta(hours=settings.ACTIVATION_TOKEN_TTL_HOURS)
    return timedelta(hours=settings.AUTHENTICATION_TOKEN_TTL_HOURS)


class TokenService:
    """Issues, verifies and revokes opaque tokens.

    Issuance and verification run sequentially within the caller's flow; the
    service holds no state beyond its repository.

    Attributes:
        tokens (ITokenRepository): Storage for token digests.
    """

    def __init__(self, tokens: ITokenRepository):
        self.tokens = tokens

    async def new(self, user_id: int, ttl: Optional[timedelta], scope: TokenScope) -> Token:
        """Generate and persist a token, returning it with its plaintext.

        A `ttl` of None uses the configured lifetime for `scope`.

        The plaintext cannot be recovered once this call returns; the caller
        must deliver it to the user and drop it.

        Raises:
            GenerationError: If the random source fails. Nothing is persisted.
        """
        token = Token.generate(user_id, ttl if ttl is not None else default_ttl(scope), scope)
        await self.tokens.insert(token)

        logger.info(
            "Token issued",
            user_id=user_id,
            scope=token.scope.value,
            expiry=token.expiry.isoformat(),
            hash_prefix=token.hash[:4].hex(),
        )
        return token

    async def new_for_user(self, user: User, ttl: Optional[timedelta], scope: TokenScope) -> Token:
        """Replace every token `user` holds in `scope` with a fresh one."""
        await self.tokens.delete_all_for_user(scope, user.id)
        return await self.new(user.id, ttl, scope)

    async def verify(self, plaintext: str, scope: TokenScope) -> TokenMatch:
        """Resolve a presented plaintext to its owner.

        Raises:
            ValidationError: If the plaintext is not 26 base-32 characters.
            RecordNotFoundError: If the token is unknown, has another scope,
                or has expired. The three cases are indistinguishable.
        """
        v = Validator()
        validate_token_plaintext(v, plaintext)
        v.raise_if_invalid()

        try:
            match = await self.tokens.find_by_digest(hash_token_plaintext(plaintext), TokenScope(scope))
        except RecordNotFoundError:
            logger.info("Token verification failed", scope=TokenScope(scope).value)
            raise

        logger.debug("Token verified", user_id=match.user_id, scope=TokenScope(scope).value)
        return match

    async def consume(self, user_id: int, scope: TokenScope) -> None:
        """Revoke every token of `scope` for `user_id` after a successful use."""
        await self.tokens.delete_all_for_user(TokenScope(scope), user_id)
        logger.info("Tokens revoked", user_id=user_id, scope=TokenScope(scope).value)
