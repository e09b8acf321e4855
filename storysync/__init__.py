"""storysync - keep a local media folder in sync with a Storyblok asset library."""

from .api import StoryblokClient
from .config import Config
from .exceptions import (
    CorruptRegistryError,
    RemoteUnavailableError,
    StoryblokAPIError,
    StoryblokAuthenticationError,
    StoryblokConfigError,
    StoryblokError,
    StoryblokInvalidResponseError,
    StoryblokNetworkError,
    StoryblokNotFoundError,
    StoryblokPermissionError,
    StoryblokRateLimitError,
    StoryblokUploadError,
    UploadFailedError,
)
from .utils import compute_fingerprint

__version__ = "0.1.0"

__all__ = [
    "StoryblokClient",
    "Config",
    "CorruptRegistryError",
    "RemoteUnavailableError",
    "StoryblokAPIError",
    "StoryblokAuthenticationError",
    "StoryblokConfigError",
    "StoryblokError",
    "StoryblokInvalidResponseError",
    "StoryblokNetworkError",
    "StoryblokNotFoundError",
    "StoryblokPermissionError",
    "StoryblokRateLimitError",
    "StoryblokUploadError",
    "UploadFailedError",
    "compute_fingerprint",
]
