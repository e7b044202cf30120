# lounge/errors.py

from __future__ import annotations

from typing import Optional


class BookingError(Exception):
    """Base class for every failure the application reports to a user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """A field failed a local check. Raised before any network call."""

    def __init__(self, field: Optional[str], message: str):
        super().__init__(message)
        self.field = field


class PersistenceError(BookingError):
    """The hosted database rejected a read or write. Message is passed through as-is."""


class ConfigurationError(BookingError):
    pass
