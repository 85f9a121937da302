"""Centralized, structured exception hierarchy for Warden.

Each application error carries a machine-readable `code` for programmatic
handling and a human-readable `message` for logging. The orchestration layer
maps them onto its own outcomes (conflict, not found, retry, server error).

One fault deliberately sits outside the hierarchy:
`PasswordDigestMissingError` signals a broken caller invariant and must not be
absorbed by handlers that catch `WardenError`.
"""

from typing import Final, Mapping, Optional

__all__: Final = [
    "WardenError",
    "ValidationError",
    "DuplicateEmailError",
    "RecordNotFoundError",
    "NotFoundError",
    "EditConflictError",
    "DeadlineExceededError",
    "DatabaseError",
    "GenerationError",
    "HashingError",
    "EmailServiceError",
    "TemplateRenderError",
    "EmailDeliveryError",
    "PasswordDigestMissingError",
]


class WardenError(Exception):
    """Base exception class for all application errors.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Validation errors (user-correctable)
# ---------------------------------------------------------------------------


class ValidationError(WardenError):
    """Raised when user-supplied data fails one or more checks.

    The failures are collected rather than raised one at a time, so `errors`
    holds every offending field with its message.

    Attributes:
        errors (dict[str, str]): Field name to message.
    """

    def __init__(
        self,
        errors: Mapping[str, str],
        message: str = "Validation failed",
        code: str = "validation_error",
    ):
        self.errors = dict(errors)
        super().__init__(message, code)

    def __str__(self) -> str:
        details = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        return f"{self.message} ({details})" if details else self.message


# ---------------------------------------------------------------------------
# Persistence errors
# ---------------------------------------------------------------------------


class DuplicateEmailError(WardenError):
    """Raised when an insert or update collides with another user's email.

    Recoverable; maps to a conflict outcome.
    """

    def __init__(self, message: str = "A user with this email address already exists", code: str = "duplicate_email"):
        super().__init__(message, code)


class RecordNotFoundError(WardenError):
    """Raised when no record matches a lookup.

    Token lookups raise this for every kind of miss (unknown token, wrong
    scope, expired) without saying which one occurred.
    """

    def __init__(self, message: str = "Record not found", code: str = "record_not_found"):
        super().__init__(message, code)


NotFoundError = RecordNotFoundError


class EditConflictError(WardenError):
    """Raised when a versioned update finds the record already advanced.

    Another writer committed between this caller's read and write. The caller
    must reload and retry, or propagate the conflict.
    """

    def __init__(
        self,
        message: str = "Unable to update the record due to an edit conflict, please try again",
        code: str = "edit_conflict",
    ):
        super().__init__(message, code)


class DeadlineExceededError(WardenError):
    """Raised when a store operation runs past its deadline."""

    def __init__(self, message: str = "The operation exceeded its deadline", code: str = "deadline_exceeded"):
        super().__init__(message, code)


class DatabaseError(WardenError):
    """Wraps driver failures so their text never crosses the store boundary."""

    def __init__(self, message: str = "A database error occurred", code: str = "database_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Secrets subsystem errors (fatal, detail is for operators only)
# ---------------------------------------------------------------------------


class GenerationError(WardenError):
    """Raised when the secure random source fails during token issuance."""

    def __init__(self, message: str = "A critical error occurred during token generation.", code: str = "token_generation_error"):
        super().__init__(message, code)


class HashingError(WardenError):
    """Raised when the password digest primitive fails or a stored digest is corrupt."""

    def __init__(self, message: str = "A critical error occurred during password hashing.", code: str = "password_hashing_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Email errors
# ---------------------------------------------------------------------------


class EmailServiceError(WardenError):
    """Base class for email rendering and delivery failures."""

    def __init__(self, message: str, code: str = "email_service_error"):
        super().__init__(message, code)


class TemplateRenderError(EmailServiceError):
    """Raised when a template resource or one of its fragments is missing or malformed.

    This is a static configuration defect and is never retried.
    """

    def __init__(self, message: str, code: str = "template_render_error"):
        super().__init__(message, code)


class EmailDeliveryError(EmailServiceError):
    """Raised in strict delivery mode once every attempt has failed.

    Attributes:
        attempts (int): Number of attempts made.
        last_error (Exception | None): The error from the final attempt.
    """

    def __init__(
        self,
        message: str,
        attempts: int = 0,
        last_error: Optional[BaseException] = None,
        code: str = "email_delivery_error",
    ):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Programming defects
# ---------------------------------------------------------------------------


class PasswordDigestMissingError(RuntimeError):
    """A user reached the store without a password digest.

    This is a defect in the calling code (a password was never set), not bad
    user input, so it is not a `WardenError` and is not folded into
    `ValidationError`.
    """

    def __init__(self, message: str = "missing password hash for user"):
        super().__init__(message)
