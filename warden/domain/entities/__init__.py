from warden.domain.entities.token import Token, TokenMatch, TokenScope, TokenView
from warden.domain.entities.user import User, UserView

__all__ = ["Token", "TokenMatch", "TokenScope", "TokenView", "User", "UserView"]
