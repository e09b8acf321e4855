"""Exceptions raised by storysync."""

from typing import Optional


class StoryblokError(Exception):
    """Base exception for all storysync errors."""


class StoryblokConfigError(StoryblokError):
    """Raised when required configuration is missing or invalid."""


class StoryblokAPIError(StoryblokError):
    """Raised when a Storyblok management API request fails."""


class StoryblokAuthenticationError(StoryblokAPIError):
    """Raised when the management token is rejected."""


class StoryblokPermissionError(StoryblokAPIError):
    """Raised when the token lacks access to the requested resource."""


class StoryblokNotFoundError(StoryblokAPIError):
    """Raised when the requested resource does not exist."""


class StoryblokRateLimitError(StoryblokAPIError):
    """Raised when the API rate limit has been exceeded."""


class StoryblokNetworkError(StoryblokAPIError):
    """Raised on transport failures (DNS, connection, timeouts)."""


class StoryblokInvalidResponseError(StoryblokAPIError):
    """Raised when the API returns a body that is not valid JSON."""


class StoryblokUploadError(StoryblokAPIError):
    """Raised when the blob store rejects a file transfer."""


class CorruptRegistryError(StoryblokError):
    """Raised when the persisted asset registry cannot be parsed."""


class RemoteUnavailableError(StoryblokError):
    """Raised when the remote asset directory cannot be fetched."""


class UploadFailedError(StoryblokError):
    """Raised when one step of the upload handshake fails for a file.

    Attributes:
        step: Handshake step that failed ("sign", "transfer" or "finalize")
        cause: Underlying exception, if any
    """

    def __init__(
        self, step: str, message: str, cause: Optional[BaseException] = None
    ):
        super().__init__(f"{step} failed: {message}")
        self.step = step
        self.cause = cause
