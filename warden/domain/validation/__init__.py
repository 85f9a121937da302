from warden.domain.validation.validator import (
    EMAIL_PATTERN,
    Validator,
    validate_email,
    validate_password_plaintext,
)

__all__ = [
    "EMAIL_PATTERN",
    "Validator",
    "validate_email",
    "validate_password_plaintext",
]
