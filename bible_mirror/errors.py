"""Exceptions raised inside bible-mirror."""


class BibleMirrorError(Exception):
    """Base class for application errors."""


class ConfigurationError(BibleMirrorError):
    """A required setting (such as an API key) is missing or invalid."""


class FetchError(BibleMirrorError):
    """A scripture API returned an error status or an unusable payload."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChannelUnavailable(BibleMirrorError):
    """The requested synchronization backend cannot be used in this process."""
