"""Data models for Storyblok assets."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class RemoteAsset:
    """An asset as known to the Storyblok asset library."""

    id: int
    filename: str
    """CDN URL of the asset"""

    name: Optional[str] = None
    alt: Optional[str] = None
    title: Optional[str] = None
    focus: Optional[str] = None
    """Focal point hint, e.g. ``"120x80:121x81"``"""

    content_type: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RemoteAsset":
        """Create a RemoteAsset from a management API asset dictionary."""
        return cls(
            id=data["id"],
            filename=data.get("filename") or "",
            name=data.get("name"),
            alt=data.get("alt"),
            title=data.get("title"),
            focus=data.get("focus"),
            content_type=data.get("content_type"),
        )


@dataclass(frozen=True)
class SignedUploadTicket:
    """Credentials returned by the sign step of the upload handshake."""

    post_url: str
    fields: dict[str, Any]
    asset_id: int

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "SignedUploadTicket":
        """Create a ticket from the signed response.

        Raises:
            KeyError: If ``post_url`` or ``id`` is missing
            TypeError: If ``fields`` is not an object
        """
        fields = data.get("fields") or {}
        if not isinstance(fields, dict):
            raise TypeError(f"fields must be an object, got {type(fields).__name__}")
        return cls(
            post_url=data["post_url"],
            fields=dict(fields),
            asset_id=data["id"],
        )


@dataclass(frozen=True)
class ResolvedAsset:
    """The published asset for one local file, skipped or freshly uploaded."""

    id: int
    filename: str
    name: str
    alt: str = ""
    title: str = ""
    focus: Optional[str] = None
    content_type: Optional[str] = None

    @classmethod
    def from_remote(cls, asset: RemoteAsset, local_name: str) -> "ResolvedAsset":
        """Build a resolved asset, falling back to the local file name."""
        return cls(
            id=asset.id,
            filename=asset.filename,
            name=asset.name or local_name,
            alt=asset.alt or "",
            title=asset.title or "",
            focus=asset.focus or None,
            content_type=asset.content_type,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the snapshot document format."""
        return {
            "id": self.id,
            "filename": self.filename,
            "name": self.name,
            "alt": self.alt,
            "title": self.title,
            "focus": self.focus,
            "content_type": self.content_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResolvedAsset":
        """Create from a snapshot document entry."""
        return cls(
            id=data["id"],
            filename=data.get("filename", ""),
            name=data.get("name", ""),
            alt=data.get("alt") or "",
            title=data.get("title") or "",
            focus=data.get("focus"),
            content_type=data.get("content_type"),
        )


@dataclass
class SyncResult:
    """Outcome of one sync run."""

    assets: list[ResolvedAsset] = field(default_factory=list)
    """Resolved assets in directory-listing order"""

    uploaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    divergent: list[str] = field(default_factory=list)
    planned: list[str] = field(default_factory=list)
    """Files a dry run would upload"""

    dry_run: bool = False

    @property
    def total(self) -> int:
        return len(self.assets)

    def to_dict(self) -> dict[str, Any]:
        """Summary suitable for JSON output."""
        return {
            "uploaded": len(self.uploaded),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
            "total": self.total,
            "divergent": self.divergent,
            "planned": self.planned,
            "failed_files": self.failed,
            "dry_run": self.dry_run,
        }
