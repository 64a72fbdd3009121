from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class DuplicateFieldError(UserError):
    """Raised when a unique index rejects a field other than the allocated sequence id."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Duplicate value for '{field}' rejected by a unique index")
        self.field = field


class AllocationExhaustedError(Exception):
    """Raised when every attempt to insert a record collided on its allocated sequence id."""

    def __init__(self, sequence_name: str, attempts: int) -> None:
        super().__init__(f"Failed to allocate a unique '{sequence_name}' after {attempts} attempts")
        self.sequence_name = sequence_name
        self.attempts = attempts


class StoreUnavailableError(Exception):
    """Raised when MongoDB cannot be reached or a round trip times out."""

    def __init__(self, message: str = "Database unavailable") -> None:
        super().__init__(message)
