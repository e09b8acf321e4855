"""Persistent registry of uploaded assets.

The registry remembers, for every local file name, the content hash that
was last uploaded and the remote asset it became. It is what lets a sync
run skip files that have not changed since the previous run.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..exceptions import CorruptRegistryError
from ..utils import utc_timestamp, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass
class RegistryEntry:
    """Record of the last successful upload of a local file."""

    remote_asset_id: int
    """ID assigned by Storyblok"""

    fingerprint: str
    """Content hash of the file at upload time"""

    remote_filename: str
    """CDN URL of the uploaded asset"""

    uploaded_at: Optional[str] = None
    """ISO timestamp of the upload"""

    def to_dict(self) -> dict[str, Any]:
        """Convert entry to dictionary for JSON serialization."""
        return {
            "id": self.remote_asset_id,
            "hash": self.fingerprint,
            "filename": self.remote_filename,
            "uploadedAt": self.uploaded_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RegistryEntry":
        """Create RegistryEntry from dictionary.

        Raises:
            KeyError: If ``id`` or ``hash`` is missing
        """
        return cls(
            remote_asset_id=data["id"],
            fingerprint=data["hash"],
            remote_filename=data.get("filename", ""),
            uploaded_at=data.get("uploadedAt"),
        )


@dataclass
class Registry:
    """All registry entries plus the time of the last sync."""

    assets: dict[str, RegistryEntry] = field(default_factory=dict)
    """Mapping of local file name to entry"""

    last_synced_at: Optional[str] = None
    """ISO timestamp of the last save"""

    def get(self, name: str) -> Optional[RegistryEntry]:
        return self.assets.get(name)

    def to_dict(self) -> dict[str, Any]:
        """Convert registry to dictionary for JSON serialization."""
        return {
            "assets": {name: entry.to_dict() for name, entry in self.assets.items()},
            "lastSync": self.last_synced_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Registry":
        """Create Registry from a parsed document.

        Raises:
            CorruptRegistryError: If the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise CorruptRegistryError("Registry document is not an object")

        raw_assets = data.get("assets", {})
        if not isinstance(raw_assets, dict):
            raise CorruptRegistryError("Registry 'assets' is not an object")

        last_sync = data.get("lastSync")
        if last_sync is not None and not isinstance(last_sync, str):
            raise CorruptRegistryError("Registry 'lastSync' is not a timestamp")

        assets: dict[str, RegistryEntry] = {}
        for name, raw_entry in raw_assets.items():
            if not isinstance(raw_entry, dict):
                raise CorruptRegistryError(f"Registry entry for {name} is invalid")
            try:
                assets[name] = RegistryEntry.from_dict(raw_entry)
            except KeyError as e:
                raise CorruptRegistryError(
                    f"Registry entry for {name} is missing {e}"
                ) from e

        return cls(assets=assets, last_synced_at=last_sync)


class RegistryStore:
    """Loads and saves the registry as a single JSON document.

    There is exactly one writer per run and no locking; concurrent runs
    against the same file are not supported.
    """

    def __init__(self, path: Path):
        """Initialize registry store.

        Args:
            path: Location of the registry document
        """
        self.path = path

    def load(self) -> Registry:
        """Load the registry.

        Returns:
            The stored registry, or an empty one if no document exists

        Raises:
            CorruptRegistryError: If the document cannot be parsed
            OSError: If the document exists but cannot be read
        """
        if not self.path.exists():
            logger.debug(f"No asset registry found at {self.path}")
            return Registry()

        with open(self.path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise CorruptRegistryError(
                    f"Asset registry {self.path} is not valid JSON: {e}"
                ) from e

        registry = Registry.from_dict(data)
        logger.debug(
            f"Loaded asset registry with {len(registry.assets)} entries "
            f"from {registry.last_synced_at}"
        )
        return registry

    def save(self, registry: Registry) -> None:
        """Save the registry, replacing the stored document.

        ``registry.last_synced_at`` is set to the current time.

        Raises:
            OSError: If the document cannot be written
        """
        registry.last_synced_at = utc_timestamp()
        write_json_atomic(self.path, registry.to_dict())
        logger.debug(
            f"Saved asset registry with {len(registry.assets)} entries to {self.path}"
        )

    def clear(self) -> bool:
        """Delete the stored registry.

        Returns:
            True if a registry was deleted, False if none existed
        """
        if self.path.exists():
            self.path.unlink()
            logger.debug(f"Cleared asset registry at {self.path}")
            return True
        return False
