"""ICS-specific exceptions for error handling."""

from typing import Optional


class ICSError(Exception):
    """Base exception for ICS-related errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ICSFetchError(ICSError):
    """Exception raised when ICS file cannot be fetched."""


class ICSParseError(ICSError):
    """Exception raised when ICS content cannot be parsed."""


class RecurrenceExpansionError(ICSError):
    """Exception raised when a recurrence rule cannot be expanded."""
