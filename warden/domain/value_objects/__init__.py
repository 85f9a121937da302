from warden.domain.value_objects.password import PasswordSecret

__all__ = ["PasswordSecret"]
