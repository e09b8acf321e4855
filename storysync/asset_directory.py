"""Read-only view of the remote asset library with automatic pagination."""

import logging
from collections.abc import Iterable, Iterator
from pathlib import PurePosixPath
from typing import Optional

from .api import StoryblokClient
from .exceptions import RemoteUnavailableError, StoryblokAPIError
from .models import RemoteAsset
from .utils import DEFAULT_ASSETS_PER_PAGE

logger = logging.getLogger(__name__)


class AssetSnapshot:
    """Point-in-time list of remote assets, fetched once per sync run."""

    def __init__(self, assets: Iterable[RemoteAsset]):
        self._assets: tuple[RemoteAsset, ...] = tuple(assets)
        self._by_id: dict[int, RemoteAsset] = {}
        for asset in self._assets:
            self._by_id.setdefault(asset.id, asset)

    def __len__(self) -> int:
        return len(self._assets)

    def __iter__(self) -> Iterator[RemoteAsset]:
        return iter(self._assets)

    def get(self, asset_id: int) -> Optional[RemoteAsset]:
        """Get an asset by its remote ID."""
        return self._by_id.get(asset_id)

    def find_same_name(self, local_name: str) -> Optional[RemoteAsset]:
        """Find an asset that looks like the same image by name.

        An asset matches if its display name equals ``local_name`` or if the
        last segment of its CDN filename contains the local file's stem.

        Args:
            local_name: Base name of the local file

        Returns:
            First matching asset, or None
        """
        stem = PurePosixPath(local_name).stem
        for asset in self._assets:
            if asset.name == local_name:
                return asset
            if stem and stem in PurePosixPath(asset.filename).name:
                return asset
        return None


class AssetDirectory:
    """Fetches the full remote asset directory."""

    def __init__(
        self, client: StoryblokClient, per_page: int = DEFAULT_ASSETS_PER_PAGE
    ):
        """Initialize the asset directory.

        Args:
            client: Storyblok API client
            per_page: Number of assets requested per page
        """
        self.client = client
        self.per_page = per_page

    def list_all(self) -> AssetSnapshot:
        """Fetch every asset in the space.

        Pages are requested until one comes back short.

        Returns:
            Snapshot of all remote assets

        Raises:
            RemoteUnavailableError: If any page cannot be fetched
        """
        assets: list[RemoteAsset] = []
        page = 1

        try:
            while True:
                batch = self.client.get_assets(page=page, per_page=self.per_page)
                assets.extend(RemoteAsset.from_api_response(item) for item in batch)
                logger.debug(f"Fetched asset page {page} ({len(batch)} assets)")
                if len(batch) < self.per_page:
                    break
                page += 1
        except StoryblokAPIError as e:
            raise RemoteUnavailableError(
                f"Could not fetch remote assets: {e}"
            ) from e
        except (KeyError, TypeError) as e:
            raise RemoteUnavailableError(
                f"Unexpected asset data from server: {e}"
            ) from e

        logger.debug(f"Remote directory holds {len(assets)} assets")
        return AssetSnapshot(assets)
