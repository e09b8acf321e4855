"""Utility functions for storysync."""

import hashlib
import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

# =============================================================================
# Constants
# =============================================================================

# Extensions accepted from the media directory, mapped to their MIME type
IMAGE_MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}

# Number of assets requested per page when listing the remote directory
DEFAULT_ASSETS_PER_PAGE: int = 100


# =============================================================================
# Hash calculation utilities
# =============================================================================


def compute_fingerprint(file_path: Path) -> str:
    """Calculate the content fingerprint of a file.

    The whole file is read in one pass and hashed with SHA-256.

    Args:
        file_path: Path to the file

    Returns:
        64 character lowercase hex digest

    Raises:
        OSError: If the file cannot be read

    Examples:
        >>> compute_fingerprint(Path("empty.png"))  # doctest: +SKIP
        'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    """
    return hashlib.sha256(Path(file_path).read_bytes()).hexdigest()


def short_fingerprint(fingerprint: str, length: int = 12) -> str:
    """Shorten a fingerprint for display."""
    return f"{fingerprint[:length]}..."


# =============================================================================
# Timestamp utilities
# =============================================================================


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Format a UTC timestamp as ISO 8601 with milliseconds and a Z suffix.

    Examples:
        >>> utc_timestamp(datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2025-01-15T10:30:00.000Z'
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_iso_timestamp(timestamp_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO format timestamp.

    Args:
        timestamp_str: ISO format timestamp string (e.g., "2025-01-15T10:30:00.000Z")

    Returns:
        datetime object in local timezone or None if parsing fails
    """
    if not timestamp_str:
        return None

    try:
        # The 'Z' suffix indicates UTC time
        if timestamp_str.endswith("Z"):
            timestamp_str = timestamp_str[:-1] + "+00:00"

        dt = datetime.fromisoformat(timestamp_str)
        if dt.tzinfo is not None:
            return datetime.fromtimestamp(dt.timestamp())
        return dt
    except (ValueError, AttributeError):
        return None


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


# =============================================================================
# File utilities
# =============================================================================


def write_json_atomic(path: Path, data: Any) -> None:
    """Write a JSON document by writing a sibling temp file and renaming it.

    The parent directory is created if missing. Readers see either the old
    document or the new one, never a partial write.

    Args:
        path: Destination file
        data: JSON-serializable data

    Raises:
        OSError: If the document cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
