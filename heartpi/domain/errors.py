"""
Error taxonomy for the risk engine.

Every error raised on purpose by the package derives from HeartPiError so a
presentation layer can catch the whole family in one place.
"""


class HeartPiError(Exception):
    """Base class for all HeartPi errors."""


class ValidationError(HeartPiError, ValueError):
    """Malformed survey input or malformed credentials."""


class DuplicateUserError(HeartPiError):
    """Registration attempted for a username that already exists."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Username already exists: {username}")
        self.username = username


class InvalidCredentialsError(HeartPiError):
    """Login or verification failed."""


class StorageIOError(HeartPiError):
    """Record store or vitals log could not be read or written."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class AlertDeliveryError(HeartPiError):
    """Mail transport reported that a caregiver alert was not sent."""
