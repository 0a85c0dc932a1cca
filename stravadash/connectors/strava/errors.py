"""Exceptions raised by the Strava connector."""

from typing import Optional


class StravaError(Exception):
    """Base exception for Strava connector errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize StravaError.

        Args:
            message: Error message describing what went wrong.
            original_error: The original exception that caused this error.
        """
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(StravaError):
    """Raised when client credentials or the refresh token are missing."""

    pass


class AuthExchangeError(StravaError):
    """Raised when the token endpoint rejects an exchange or answers garbage."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.status_code = status_code


class FetchError(StravaError):
    """Raised when the activities endpoint is unreachable, times out or fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.status_code = status_code
