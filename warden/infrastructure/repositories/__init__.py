from warden.infrastructure.repositories.in_memory import InMemoryTokenRepository, InMemoryUserRepository
from warden.infrastructure.repositories.token_repository import TokenRepository
from warden.infrastructure.repositories.user_repository import UserRepository

__all__ = [
    "InMemoryTokenRepository",
    "InMemoryUserRepository",
    "TokenRepository",
    "UserRepository",
]
