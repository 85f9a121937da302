from warden.domain.interfaces.email import IMailer
from warden.domain.interfaces.repositories import ITokenRepository, IUserRepository

__all__ = ["IMailer", "ITokenRepository", "IUserRepository"]
