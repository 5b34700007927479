"""
Domain Exceptions Module

Every failure here is local to one user action and recoverable by retrying.
"""

from typing import Optional


class AttendanceError(Exception):
    """Base exception for attendance-related errors."""
    pass


class OutOfWindowError(AttendanceError):
    """Raised when a punch is attempted outside its half-day window."""

    def __init__(self, half_day: str, now: str, start: str, end: str):
        self.half_day = half_day
        self.now = now
        self.window = (start, end)
        super().__init__(
            f"{half_day} clock-in is only available between {start} and {end} (now {now})."
        )


class AlreadyPunchedError(AttendanceError):
    """Raised on a second clock-in for the same half-day."""

    def __init__(self, half_day: str, existing: str):
        self.half_day = half_day
        self.existing = existing
        super().__init__(f"You have already clocked in for {half_day} at {existing}.")


class InvalidRangeError(AttendanceError):
    """Raised when a filing date range cannot be parsed or is reversed."""
    pass


class InvalidTimeError(AttendanceError):
    """Raised when a manually entered time is not a valid clock time."""
    pass


class PermissionDeniedError(AttendanceError):
    """Raised when a non-privileged user attempts a privileged mutation."""
    pass


class PersistenceError(AttendanceError):
    """
    Raised when a write to the record store fails.

    The outcome of the write is unknown; callers should trust the
    re-fetched store contents rather than any local mutation.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)
