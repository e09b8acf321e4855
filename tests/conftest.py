"""Shared fixtures for storysync tests."""

import tempfile
from pathlib import Path
from typing import Any, Optional
from unittest.mock import Mock

import pytest

from storysync.config import Config
from storysync.exceptions import StoryblokUploadError
from storysync.output import OutputFormatter


class FakeStoryblok:
    """In-memory stand-in for StoryblokClient's asset endpoints."""

    def __init__(self) -> None:
        self.assets: dict[int, dict[str, Any]] = {}
        self.pending: dict[int, str] = {}
        self.next_id = 1000
        self.transfers: list[str] = []
        self.fail_transfer_for: set[str] = set()

    def add_asset(self, asset_id: int, filename: str) -> dict[str, Any]:
        asset = {
            "id": asset_id,
            "filename": f"https://a.storyblok.com/f/1/{asset_id}/{filename}",
            "short_filename": filename,
            "alt": None,
            "title": None,
            "focus": None,
            "content_type": "image/png",
        }
        self.assets[asset_id] = asset
        return asset

    def get_assets(self, page: int = 1, per_page: int = 100) -> list[dict[str, Any]]:
        items = list(self.assets.values())
        start = (page - 1) * per_page
        return items[start : start + per_page]

    def sign_asset_upload(
        self, filename: str, asset_folder_id: Optional[int] = None
    ) -> dict[str, Any]:
        self.next_id += 1
        self.pending[self.next_id] = filename
        return {
            "id": self.next_id,
            "post_url": "https://blob.example.com/upload",
            "fields": {"key": f"f/1/{self.next_id}/{filename}", "policy": "abc"},
        }

    def upload_to_blob_store(
        self,
        post_url: str,
        fields: dict[str, Any],
        file_path: Path,
        mime_type: str = "application/octet-stream",
    ) -> None:
        if file_path.name in self.fail_transfer_for:
            raise StoryblokUploadError("Blob store upload failed with status 500")
        self.transfers.append(file_path.name)

    def finish_asset_upload(self, asset_id: int) -> dict[str, Any]:
        filename = self.pending.pop(asset_id)
        return self.add_asset(asset_id, filename)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def media_dir(temp_dir):
    """Create an empty media directory."""
    path = temp_dir / "media"
    path.mkdir()
    return path


@pytest.fixture
def config(temp_dir, media_dir):
    """Config pointing all paths into the temp directory."""
    return Config(
        management_token="test_token",
        space_id="12345",
        media_dir=media_dir,
        registry_path=temp_dir / "data" / "asset-registry.json",
        snapshot_path=temp_dir / "data" / "uploaded-assets.json",
        max_retries=0,
        retry_delay=0.0,
    )


@pytest.fixture
def fake_client():
    """Create an in-memory Storyblok client."""
    return FakeStoryblok()


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    output.json_output = False
    return output
