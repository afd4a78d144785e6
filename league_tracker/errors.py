"""Exception types shared across the tracker."""

from typing import Optional


class TrackerError(Exception):
    """Base class for tracker failures."""


class ProviderError(TrackerError):
    """A provider payload could not be fetched or decoded."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(TrackerError, ValueError):
    """Settings are missing or malformed."""
