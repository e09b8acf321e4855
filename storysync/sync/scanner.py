"""Media directory scanning for asset sync."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..utils import IMAGE_MIME_TYPES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """Represents an image in the media directory."""

    name: str
    """Base file name, unique within the media directory"""

    path: Path
    """Absolute path to the file"""

    size: int
    """File size in bytes"""

    mime_hint: str
    """MIME type derived from the extension"""

    @classmethod
    def from_path(cls, file_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Raises:
            OSError: If the file cannot be stat'ed
            ValueError: If the extension is not an accepted image type
        """
        mime_hint = mime_type_for(file_path)
        if mime_hint is None:
            raise ValueError(f"Unsupported file type: {file_path.name}")
        return cls(
            name=file_path.name,
            path=file_path.resolve(),
            size=file_path.stat().st_size,
            mime_hint=mime_hint,
        )


def mime_type_for(file_path: Path) -> Optional[str]:
    """Return the MIME type for an accepted image extension, else None."""
    return IMAGE_MIME_TYPES.get(file_path.suffix.lower())


class MediaScanner:
    """Lists the images of a media directory.

    Only the top level is scanned. Files whose extension is not in the
    allow-list (jpg, jpeg, png, gif) are silently ignored. Files are
    returned in directory-listing order; no sorting is applied.

    Examples:
        >>> scanner = MediaScanner()
        >>> files = scanner.scan(Path("media"))  # doctest: +SKIP
        >>> [f.name for f in files]  # doctest: +SKIP
        ['cover.jpg', 'logo.png']
    """

    def __init__(self, exclude_dot_files: bool = True):
        """Initialize media scanner.

        Args:
            exclude_dot_files: Whether to skip files starting with a dot
        """
        self.exclude_dot_files = exclude_dot_files

    def scan(self, directory: Path) -> list[LocalFile]:
        """Scan a media directory.

        Args:
            directory: Directory to scan

        Returns:
            List of LocalFile objects in listing order

        Raises:
            FileNotFoundError: If the directory does not exist
            NotADirectoryError: If the path is not a directory
            OSError: If the directory cannot be listed
        """
        if not directory.exists():
            raise FileNotFoundError(f"Media directory does not exist: {directory}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Media path is not a directory: {directory}")

        files: list[LocalFile] = []
        for item in directory.iterdir():
            if self.exclude_dot_files and item.name.startswith("."):
                continue
            if mime_type_for(item) is None or not item.is_file():
                continue
            try:
                files.append(LocalFile.from_path(item))
            except OSError as e:
                logger.warning(f"Skipping unreadable file {item.name}: {e}")

        logger.debug(f"Found {len(files)} image(s) in {directory}")
        return files
