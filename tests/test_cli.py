"""Unit tests for the storysync CLI commands."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from storysync.cli import main
from storysync.exceptions import (
    CorruptRegistryError,
    RemoteUnavailableError,
    StoryblokAuthenticationError,
)
from storysync.models import ResolvedAsset, SyncResult
from storysync.sync import Registry, RegistryEntry, RegistryStore
from storysync.utils import compute_fingerprint

CREDENTIALS = ["--token", "test_token", "--space-id", "12345"]
NO_ENV = {"STORYBLOK_MANAGEMENT_TOKEN": None, "STORYBLOK_SPACE_ID": None}


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_client():
    """Patch the client class used by the CLI."""
    with patch("storysync.cli.StoryblokClient") as mock_client_class:
        client = MagicMock()
        client.get_space.return_value = {"id": 12345, "name": "My Blog"}
        mock_client_class.return_value = client
        yield client


def _result(**kwargs) -> SyncResult:
    asset = ResolvedAsset(id=1, filename="https://a.storyblok.com/f/1/a.png", name="a.png")
    values = {"assets": [asset], "uploaded": ["a.png"]}
    values.update(kwargs)
    return SyncResult(**values)


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--token" in result.output
        for command in ["sync", "status", "assets", "check", "reset"]:
            assert command in result.output


class TestSyncCommand:
    """Tests for the sync command."""

    def test_missing_credentials_exit_before_processing(self, runner, temp_dir):
        """Test that missing environment variables abort with status 1."""
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            result = runner.invoke(main, ["sync", str(temp_dir)], env=NO_ENV)

        assert result.exit_code == 1
        assert "STORYBLOK_MANAGEMENT_TOKEN" in result.output
        assert "STORYBLOK_SPACE_ID" in result.output
        mock_engine_class.assert_not_called()

    def test_credentials_from_environment(self, runner, mock_client, temp_dir):
        """Test that credentials are read from the environment by the CLI."""
        env = {"STORYBLOK_MANAGEMENT_TOKEN": "env_token", "STORYBLOK_SPACE_ID": "7"}
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            mock_engine_class.return_value.sync.return_value = _result()
            result = runner.invoke(main, ["sync", str(temp_dir)], env=env)

        assert result.exit_code == 0
        config = mock_engine_class.call_args.args[1]
        assert config.management_token == "env_token"
        assert config.space_id == "7"

    def test_successful_sync(self, runner, mock_client, temp_dir):
        """Test a sync that uploads one file."""
        registry = temp_dir / "reg.json"
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            mock_engine_class.return_value.sync.return_value = _result()
            result = runner.invoke(
                main,
                CREDENTIALS
                + [
                    "sync",
                    str(temp_dir),
                    "--registry",
                    str(registry),
                    "--asset-folder-id",
                    "5",
                    "--checkpoint",
                ],
            )

        assert result.exit_code == 0, result.output
        assert "Connected to space: My Blog" in result.output
        config = mock_engine_class.call_args.args[1]
        assert config.media_dir == temp_dir
        assert config.registry_path == registry
        assert config.asset_folder_id == 5
        assert config.checkpoint_each_upload is True
        mock_engine_class.return_value.sync.assert_called_once_with(dry_run=False)

    def test_dry_run_flag(self, runner, mock_client, temp_dir):
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            mock_engine_class.return_value.sync.return_value = _result(
                uploaded=[], assets=[], planned=["a.png"], dry_run=True
            )
            result = runner.invoke(
                main, CREDENTIALS + ["sync", str(temp_dir), "--dry-run"]
            )

        assert result.exit_code == 0
        mock_engine_class.return_value.sync.assert_called_once_with(dry_run=True)

    def test_failed_files_exit_nonzero(self, runner, mock_client, temp_dir):
        """Test that per-file failures complete the run but exit with 1."""
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            mock_engine_class.return_value.sync.return_value = _result(
                failed=["b.png"]
            )
            result = runner.invoke(main, CREDENTIALS + ["sync", str(temp_dir)])

        assert result.exit_code == 1

    def test_json_output(self, runner, mock_client, temp_dir):
        """Test the JSON summary."""
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            mock_engine_class.return_value.sync.return_value = _result(
                skipped=["b.png"]
            )
            result = runner.invoke(
                main, CREDENTIALS + ["--json", "sync", str(temp_dir)]
            )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["uploaded"] == 1
        assert data["skipped"] == 1
        assert data["total"] == 1

    @pytest.mark.parametrize(
        "error, message",
        [
            (RemoteUnavailableError("Could not fetch remote assets"), "remote assets"),
            (CorruptRegistryError("registry is not valid JSON"), "storysync reset"),
            (FileNotFoundError("Media directory does not exist"), "does not exist"),
        ],
    )
    def test_run_level_errors_exit(self, runner, mock_client, temp_dir, error, message):
        """Test that setup failures abort with status 1."""
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            mock_engine_class.return_value.sync.side_effect = error
            result = runner.invoke(main, CREDENTIALS + ["sync", str(temp_dir)])

        assert result.exit_code == 1
        assert message in result.output

    def test_bad_token_exits(self, runner, mock_client, temp_dir):
        """Test that a rejected token aborts before syncing."""
        mock_client.get_space.side_effect = StoryblokAuthenticationError(
            "Invalid management token"
        )
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            result = runner.invoke(main, CREDENTIALS + ["sync", str(temp_dir)])

        assert result.exit_code == 1
        assert "Invalid management token" in result.output
        mock_engine_class.assert_not_called()

    def test_keyboard_interrupt(self, runner, mock_client, temp_dir):
        with patch("storysync.cli.SyncEngine") as mock_engine_class:
            mock_engine_class.return_value.sync.side_effect = KeyboardInterrupt
            result = runner.invoke(main, CREDENTIALS + ["sync", str(temp_dir)])

        assert result.exit_code == 130


class TestStatusCommand:
    """Tests for the status command."""

    def test_status_json(self, runner, media_dir, temp_dir):
        """Test that files are classified as new, changed or tracked."""
        (media_dir / "new.png").write_bytes(b"new")
        (media_dir / "same.png").write_bytes(b"same")
        (media_dir / "edited.png").write_bytes(b"edited")
        registry_path = temp_dir / "reg.json"
        RegistryStore(registry_path).save(
            Registry(
                assets={
                    "same.png": RegistryEntry(
                        remote_asset_id=1,
                        fingerprint=compute_fingerprint(media_dir / "same.png"),
                        remote_filename="https://a.storyblok.com/f/1/same.png",
                    ),
                    "edited.png": RegistryEntry(
                        remote_asset_id=2,
                        fingerprint="0" * 64,
                        remote_filename="https://a.storyblok.com/f/2/edited.png",
                    ),
                }
            )
        )

        result = runner.invoke(
            main,
            ["--json", "status", str(media_dir), "--registry", str(registry_path)],
            env=NO_ENV,
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        statuses = {row["name"]: row["status"] for row in data["files"]}
        assert statuses == {"new.png": "new", "same.png": "tracked", "edited.png": "changed"}
        assert data["last_sync"] is not None

    def test_status_corrupt_registry(self, runner, media_dir, temp_dir):
        registry_path = temp_dir / "reg.json"
        registry_path.write_text("[]")

        result = runner.invoke(
            main, ["status", str(media_dir), "--registry", str(registry_path)]
        )

        assert result.exit_code == 1

    def test_status_table(self, runner, media_dir, temp_dir):
        (media_dir / "new.png").write_bytes(b"new")

        result = runner.invoke(
            main,
            ["status", str(media_dir), "--registry", str(temp_dir / "reg.json")],
        )

        assert result.exit_code == 0
        assert "new.png" in result.output
        assert "Last sync: never" in result.output


class TestAssetsCommand:
    """Tests for the assets command."""

    def test_assets_json(self, runner, mock_client):
        mock_client.get_assets.return_value = [
            {"id": 1, "filename": "https://a.storyblok.com/f/1/a.png", "content_type": "image/png"}
        ]

        result = runner.invoke(main, CREDENTIALS + ["--json", "assets"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["id"] == 1
        assert data[0]["content_type"] == "image/png"

    def test_assets_unavailable(self, runner, mock_client):
        mock_client.get_assets.side_effect = StoryblokAuthenticationError("401")

        result = runner.invoke(main, CREDENTIALS + ["assets"])

        assert result.exit_code == 1


class TestCheckCommand:
    """Tests for the check command."""

    def test_check_prints_space(self, runner, mock_client):
        result = runner.invoke(main, CREDENTIALS + ["check"])

        assert result.exit_code == 0
        assert "My Blog" in result.output

    def test_check_without_credentials(self, runner):
        result = runner.invoke(main, ["check"], env=NO_ENV)

        assert result.exit_code == 1


class TestResetCommand:
    """Tests for the reset command."""

    def test_reset_deletes_registry(self, runner, temp_dir):
        registry_path = temp_dir / "reg.json"
        RegistryStore(registry_path).save(Registry())

        result = runner.invoke(main, ["reset", "--registry", str(registry_path), "--yes"])

        assert result.exit_code == 0
        assert not registry_path.exists()

    def test_reset_declined(self, runner, temp_dir):
        registry_path = temp_dir / "reg.json"
        RegistryStore(registry_path).save(Registry())

        result = runner.invoke(
            main, ["reset", "--registry", str(registry_path)], input="n\n"
        )

        assert result.exit_code == 0
        assert registry_path.exists()
