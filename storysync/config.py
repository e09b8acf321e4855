"""Configuration for storysync.

A single :class:`Config` is built once at start-up (the CLI does this from
options and environment variables) and handed to every component that
needs it. Nothing else in the package reads the process environment.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from .exceptions import StoryblokConfigError

DEFAULT_API_URL = "https://mapi.storyblok.com/v1"
DEFAULT_MEDIA_DIR = Path("media")
DEFAULT_REGISTRY_PATH = Path("src") / "data" / "asset-registry.json"
DEFAULT_SNAPSHOT_PATH = Path("src") / "data" / "uploaded-assets.json"

TOKEN_ENV = "STORYBLOK_MANAGEMENT_TOKEN"
SPACE_ID_ENV = "STORYBLOK_SPACE_ID"


@dataclass(frozen=True)
class Config:
    """Settings shared by the client, the registry and the sync engine."""

    management_token: Optional[str] = None
    """Personal access or OAuth token for the management API"""

    space_id: Optional[str] = None
    """Numeric ID of the Storyblok space, kept as a string"""

    api_url: str = DEFAULT_API_URL
    """Base URL of the management API"""

    media_dir: Path = DEFAULT_MEDIA_DIR
    """Directory scanned for images"""

    registry_path: Path = DEFAULT_REGISTRY_PATH
    """Location of the filename -> hash/remote id registry"""

    snapshot_path: Path = DEFAULT_SNAPSHOT_PATH
    """Location of the resolved asset list written after each run"""

    asset_folder_id: Optional[int] = None
    """Destination asset folder for new uploads (None for the root)"""

    timeout: float = 30.0
    """Deadline in seconds for each management API request"""

    upload_timeout: float = 60.0
    """Deadline in seconds for the blob store transfer"""

    max_retries: int = 3
    retry_delay: float = 1.0

    checkpoint_each_upload: bool = False
    """Persist the registry after every successful upload, not only at the end"""

    def with_overrides(self, **overrides: Any) -> "Config":
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> None:
        """Check that the credentials needed for API access are present.

        Raises:
            StoryblokConfigError: If any required value is missing
        """
        missing = []
        if not self.management_token:
            missing.append(TOKEN_ENV)
        if not self.space_id:
            missing.append(SPACE_ID_ENV)
        if missing:
            raise StoryblokConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
