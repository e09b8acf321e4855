"""Asset sync for storysync - hash, compare, upload, record."""

from .comparator import AssetComparator, SyncAction, SyncDecision
from .engine import SyncEngine
from .operations import UploadHandshake
from .scanner import LocalFile, MediaScanner
from .snapshot import load_asset_snapshot, save_asset_snapshot
from .state import Registry, RegistryEntry, RegistryStore

__all__ = [
    "SyncEngine",
    "SyncAction",
    "SyncDecision",
    "AssetComparator",
    "UploadHandshake",
    "LocalFile",
    "MediaScanner",
    "Registry",
    "RegistryEntry",
    "RegistryStore",
    "load_asset_snapshot",
    "save_asset_snapshot",
]
