"""CLI interface for storysync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .api import StoryblokClient
from .asset_directory import AssetDirectory
from .config import DEFAULT_API_URL, Config
from .exceptions import (
    CorruptRegistryError,
    RemoteUnavailableError,
    StoryblokAPIError,
    StoryblokConfigError,
)
from .output import OutputFormatter
from .sync import MediaScanner, RegistryStore, SyncEngine
from .utils import compute_fingerprint, parse_iso_timestamp

logger = logging.getLogger(__name__)


def _connect(ctx: Any, config: Config) -> StoryblokClient:
    """Validate credentials and create a client, exiting on setup errors."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        config.validate()
    except StoryblokConfigError as e:
        out.error(f"Environment validation failed: {e}")
        out.info("Please ensure your environment contains all required tokens.")
        ctx.exit(1)
    return StoryblokClient(config)


@click.group()
@click.option(
    "--token",
    "-t",
    envvar="STORYBLOK_MANAGEMENT_TOKEN",
    help="Storyblok management API token",
)
@click.option(
    "--space-id", "-s", envvar="STORYBLOK_SPACE_ID", help="Storyblok space ID"
)
@click.option(
    "--api-url",
    envvar="STORYBLOK_API_URL",
    default=DEFAULT_API_URL,
    show_default=True,
    help="Management API base URL",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="storysync")
@click.pass_context
def main(
    ctx: Any,
    token: Optional[str],
    space_id: Optional[str],
    api_url: str,
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """storysync - Sync a local media folder with a Storyblok asset library."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config(
        management_token=token, space_id=space_id, api_url=api_url
    )
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("storysync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument(
    "media_dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
)
@click.option(
    "--registry",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Asset registry file (default: src/data/asset-registry.json)",
)
@click.option(
    "--snapshot",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Resolved asset list file (default: src/data/uploaded-assets.json)",
)
@click.option(
    "--asset-folder-id",
    type=int,
    default=None,
    help="Asset folder to upload new files into",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be uploaded without uploading"
)
@click.option(
    "--checkpoint",
    is_flag=True,
    help="Save the registry after every upload instead of only at the end",
)
@click.pass_context
def sync(
    ctx: Any,
    media_dir: Optional[Path],
    registry: Optional[Path],
    snapshot: Optional[Path],
    asset_folder_id: Optional[int],
    dry_run: bool,
    checkpoint: bool,
) -> None:
    """Upload new and changed images, reusing unchanged assets.

    MEDIA_DIR: Directory of images to sync (default: media)
    """
    out: OutputFormatter = ctx.obj["out"]
    config: Config = ctx.obj["config"].with_overrides(
        media_dir=media_dir,
        registry_path=registry,
        snapshot_path=snapshot,
        asset_folder_id=asset_folder_id,
        checkpoint_each_upload=checkpoint or None,
    )

    client = _connect(ctx, config)
    with client:
        try:
            out.info("Testing API connection...")
            space = client.get_space()
            out.success(f"Connected to space: {space.get('name')}")
            out.print("")

            engine = SyncEngine(client, config, output=out)
            result = engine.sync(dry_run=dry_run)
        except KeyboardInterrupt:
            out.warning("\nSync cancelled by user")
            ctx.exit(130)
            return
        except CorruptRegistryError as e:
            out.error(str(e))
            out.info("Run 'storysync reset' to start over with an empty registry.")
            ctx.exit(1)
            return
        except RemoteUnavailableError as e:
            out.error(str(e))
            ctx.exit(1)
            return
        except StoryblokAPIError as e:
            out.error(f"API error: {e}")
            ctx.exit(1)
            return
        except OSError as e:
            out.error(f"File error: {e}")
            ctx.exit(1)
            return

    if out.json_output:
        out.output_json(result.to_dict())
    elif not result.dry_run and result.total == 0:
        out.warning("No assets available.")

    if result.failed:
        ctx.exit(1)


@main.command()
@click.argument(
    "media_dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
)
@click.option(
    "--registry",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Asset registry file (default: src/data/asset-registry.json)",
)
@click.pass_context
def status(ctx: Any, media_dir: Optional[Path], registry: Optional[Path]) -> None:
    """Show which local images are new, changed or already uploaded.

    Only the local registry is consulted; no API calls are made.

    MEDIA_DIR: Directory of images (default: media)
    """
    out: OutputFormatter = ctx.obj["out"]
    config: Config = ctx.obj["config"].with_overrides(
        media_dir=media_dir, registry_path=registry
    )

    try:
        local_files = MediaScanner().scan(config.media_dir)
        state = RegistryStore(config.registry_path).load()
    except CorruptRegistryError as e:
        out.error(str(e))
        ctx.exit(1)
        return
    except OSError as e:
        out.error(f"File error: {e}")
        ctx.exit(1)
        return

    rows = []
    for local_file in local_files:
        entry = state.get(local_file.name)
        try:
            fingerprint = compute_fingerprint(local_file.path)
        except OSError as e:
            out.warning(f"Cannot read {local_file.name}: {e}")
            continue

        if entry is None:
            file_status = "new"
        elif entry.fingerprint != fingerprint:
            file_status = "changed"
        else:
            file_status = "tracked"

        rows.append(
            {
                "name": local_file.name,
                "size": local_file.size,
                "status": file_status,
                "asset_id": entry.remote_asset_id if entry else None,
                "uploaded_at": entry.uploaded_at if entry else None,
            }
        )

    if out.json_output:
        out.output_json({"files": rows, "last_sync": state.last_synced_at})
        return

    if not rows:
        out.info(f"No images found in {config.media_dir}")
        return

    table_rows = []
    for row in rows:
        uploaded = parse_iso_timestamp(row["uploaded_at"])
        table_rows.append(
            [
                row["name"],
                out.format_size(row["size"]),
                row["status"],
                row["asset_id"],
                uploaded.strftime("%Y-%m-%d %H:%M") if uploaded else "",
            ]
        )
    out.output_table(
        ["File", "Size", "Status", "Asset ID", "Uploaded"],
        table_rows,
        title=f"Media in {config.media_dir}",
    )
    last_sync = parse_iso_timestamp(state.last_synced_at)
    out.info(
        f"Last sync: {last_sync.strftime('%Y-%m-%d %H:%M:%S') if last_sync else 'never'}"
    )


@main.command()
@click.pass_context
def assets(ctx: Any) -> None:
    """List assets in the Storyblok space."""
    out: OutputFormatter = ctx.obj["out"]
    config: Config = ctx.obj["config"]

    client = _connect(ctx, config)
    with client:
        try:
            snapshot = AssetDirectory(client).list_all()
        except RemoteUnavailableError as e:
            out.error(str(e))
            ctx.exit(1)
            return

    if out.json_output:
        out.output_json(
            [
                {
                    "id": asset.id,
                    "name": asset.name,
                    "filename": asset.filename,
                    "content_type": asset.content_type,
                }
                for asset in snapshot
            ]
        )
        return

    if len(snapshot) == 0:
        out.info("No assets in this space.")
        return

    out.output_table(
        ["ID", "Name", "Filename", "Type"],
        [
            [asset.id, asset.name, asset.filename, asset.content_type]
            for asset in snapshot
        ],
        title=f"{len(snapshot)} asset(s)",
    )


@main.command()
@click.pass_context
def check(ctx: Any) -> None:
    """Validate credentials and show the connected space."""
    out: OutputFormatter = ctx.obj["out"]
    config: Config = ctx.obj["config"]

    client = _connect(ctx, config)
    with client:
        try:
            space = client.get_space()
        except StoryblokAPIError as e:
            out.error(f"API error: {e}")
            ctx.exit(1)
            return

    if out.json_output:
        out.output_json({"id": space.get("id"), "name": space.get("name")})
    else:
        out.success(f"Connected to space: {space.get('name')} (ID: {space.get('id')})")


@main.command()
@click.option(
    "--registry",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Asset registry file (default: src/data/asset-registry.json)",
)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def reset(ctx: Any, registry: Optional[Path], yes: bool) -> None:
    """Delete the asset registry so the next sync uploads everything."""
    out: OutputFormatter = ctx.obj["out"]
    config: Config = ctx.obj["config"].with_overrides(registry_path=registry)

    if not yes and not click.confirm(
        f"Delete asset registry {config.registry_path}?", default=False
    ):
        out.info("Aborted.")
        return

    if RegistryStore(config.registry_path).clear():
        out.success(f"Deleted asset registry {config.registry_path}")
    else:
        out.info(f"No asset registry at {config.registry_path}")


if __name__ == "__main__":
    main()
