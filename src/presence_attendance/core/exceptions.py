from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidPayloadError(ValidationError):
    """Scanned payload does not parse or carries no holder id. Rescan."""


class TokenExpiredError(ValidationError):
    """Token is past its expiry. The holder must regenerate it."""

    def __init__(self, expires_at: int, now: Optional[int] = None):
        super().__init__("QR code has expired")
        self.expires_at = int(expires_at)
        self.now = now


class RosterNotReadyError(ValidationError):
    """Roster has not been loaded yet. Retry once it is."""

    retryable = True

    def __init__(self, message: str = "Student roster not loaded; please wait and scan again"):
        super().__init__(message)


class NotEnrolledError(ValidationError):
    """Holder id matches no roster entry for the selected section."""

    def __init__(self, student_id: str):
        super().__init__(f"Student {student_id} is not enrolled in the selected section")
        self.student_id = student_id


class DevModeDisabledError(ValidationError):
    """Dev mode was requested on a server that does not allow it."""


class DecodeError(DomainError):
    """Raised when a raster cannot be turned into a payload."""


class NoCodeFoundError(DecodeError):
    def __init__(self, message: str = "No QR code found in image"):
        super().__init__(message)


class InvalidImageError(DecodeError):
    def __init__(self, message: str = "Failed to load image"):
        super().__init__(message)


class CameraUnavailableError(DomainError):
    """Camera could not be acquired. Terminal for the scan session."""


class LocationUnavailableError(DomainError):
    """Coordinate source could not provide a fix."""

    retryable = True


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class RemoteServiceError(DomainError):
    """The attendance server answered without an explicit success flag."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
