"""The resolved asset list shared with content-creation scripts."""

import json
import logging
from pathlib import Path

from ..models import ResolvedAsset
from ..utils import write_json_atomic

logger = logging.getLogger(__name__)


def save_asset_snapshot(path: Path, assets: list[ResolvedAsset]) -> None:
    """Write the resolved assets of a run, replacing any previous list.

    Raises:
        OSError: If the document cannot be written
    """
    write_json_atomic(path, [asset.to_dict() for asset in assets])
    logger.debug(f"Saved {len(assets)} resolved asset(s) to {path}")


def load_asset_snapshot(path: Path) -> list[ResolvedAsset]:
    """Read the resolved assets written by the last run.

    Returns:
        Resolved assets in the order they were written; empty if no snapshot exists

    Raises:
        ValueError: If the document is not a list of asset objects
    """
    if not path.exists():
        return []

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Asset snapshot {path} is not a list")
    try:
        return [ResolvedAsset.from_dict(item) for item in data]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Asset snapshot {path} has an invalid entry: {e}") from e
