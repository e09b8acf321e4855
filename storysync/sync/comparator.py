"""Skip-or-upload decision logic for asset sync."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..asset_directory import AssetSnapshot
from ..models import RemoteAsset
from .scanner import LocalFile
from .state import RegistryEntry


class SyncAction(str, Enum):
    """Actions that can be taken for a local file."""

    UPLOAD = "upload"
    """Upload the file as a new asset"""

    SKIP = "skip"
    """Reuse the existing remote asset"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    local_file: LocalFile
    fingerprint: str

    remote_asset: Optional[RemoteAsset] = None
    """Existing remote asset (skip decisions only)"""

    divergent_asset: Optional[RemoteAsset] = None
    """Remote asset with the same name but content the registry does not know"""

    @property
    def divergent(self) -> bool:
        return self.divergent_asset is not None


class AssetComparator:
    """Compares a local file against the registry and the remote snapshot."""

    def __init__(self, snapshot: AssetSnapshot):
        """Initialize asset comparator.

        Args:
            snapshot: Remote assets fetched at the start of the run
        """
        self.snapshot = snapshot

    def decide(
        self,
        local_file: LocalFile,
        fingerprint: str,
        entry: Optional[RegistryEntry],
    ) -> SyncDecision:
        """Decide whether a file can be skipped.

        A file is skipped only if the registry has an entry for it, the
        entry's hash matches ``fingerprint`` and the entry's remote asset is
        still in the snapshot. Anything else is uploaded.

        Args:
            local_file: File being synced
            fingerprint: Freshly computed content hash
            entry: Registry entry for the file name, if any

        Returns:
            SyncDecision for this file
        """
        divergent_asset = self._find_divergent(local_file, fingerprint, entry)

        if entry is None:
            return SyncDecision(
                action=SyncAction.UPLOAD,
                reason="New file",
                local_file=local_file,
                fingerprint=fingerprint,
                divergent_asset=divergent_asset,
            )

        if entry.fingerprint != fingerprint:
            return SyncDecision(
                action=SyncAction.UPLOAD,
                reason="File content changed",
                local_file=local_file,
                fingerprint=fingerprint,
                divergent_asset=divergent_asset,
            )

        remote_asset = self.snapshot.get(entry.remote_asset_id)
        if remote_asset is None:
            return SyncDecision(
                action=SyncAction.UPLOAD,
                reason=f"Remote asset {entry.remote_asset_id} no longer exists",
                local_file=local_file,
                fingerprint=fingerprint,
            )

        return SyncDecision(
            action=SyncAction.SKIP,
            reason="File unchanged",
            local_file=local_file,
            fingerprint=fingerprint,
            remote_asset=remote_asset,
        )

    def _find_divergent(
        self,
        local_file: LocalFile,
        fingerprint: str,
        entry: Optional[RegistryEntry],
    ) -> Optional[RemoteAsset]:
        """Find a same-name remote asset when the registry hash differs."""
        if entry is not None and entry.fingerprint == fingerprint:
            return None
        return self.snapshot.find_same_name(local_file.name)
