"""
errors.py — Exception hierarchy for the LCS log viewer.
"""


class LogViewerError(Exception):
    """Base exception for all viewer failures."""


class ConfigError(LogViewerError, ValueError):
    """Raised for an invalid viewer configuration."""


class TimelineStoreError(LogViewerError):
    """Raised when a TimelineStore is used out of its lifecycle."""


class LogOpenError(TimelineStoreError, OSError):
    """Raised when the log source cannot be opened."""
