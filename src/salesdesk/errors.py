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


class AuthenticationError(UserError):
    """Raised when authentication fails.

    Missing, malformed, expired and revoked tokens all produce the same
    message so callers cannot tell the cases apart.
    """

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Raised on login with an unknown email or a wrong password."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class ConflictError(UserError):
    """Raised when a unique value (email, user code) is already taken."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class PersistenceError(Exception):
    """Raised when the store is unavailable or a write fails.

    Not a UserError: the message is logged server-side and never sent to the client.
    """
