"""Core sync engine for uploading media files as Storyblok assets."""

import logging
from typing import Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..api import StoryblokClient
from ..asset_directory import AssetDirectory, AssetSnapshot
from ..config import Config
from ..exceptions import UploadFailedError
from ..models import ResolvedAsset, SyncResult
from ..output import OutputFormatter
from ..utils import compute_fingerprint, short_fingerprint, utc_timestamp
from .comparator import AssetComparator, SyncAction, SyncDecision
from .operations import UploadHandshake
from .scanner import LocalFile, MediaScanner
from .snapshot import save_asset_snapshot
from .state import Registry, RegistryEntry, RegistryStore

logger = logging.getLogger(__name__)


class SyncEngine:
    """Orchestrates one asset sync run.

    Files are processed one at a time in directory-listing order. Errors
    that concern a single file (unreadable file, failed upload) are logged
    and the run continues; errors that concern the whole run (media
    directory, registry, remote directory) propagate.
    """

    def __init__(
        self,
        client: StoryblokClient,
        config: Config,
        output: Optional[OutputFormatter] = None,
        store: Optional[RegistryStore] = None,
        scanner: Optional[MediaScanner] = None,
    ):
        """Initialize sync engine.

        Args:
            client: Storyblok API client
            config: Run configuration (paths, asset folder, checkpointing)
            output: Output formatter for displaying progress/status
            store: Registry store (defaults to one at ``config.registry_path``)
            scanner: Media scanner (defaults to a top-level image scanner)
        """
        self.client = client
        self.config = config
        self.output = output or OutputFormatter()
        self.store = store or RegistryStore(config.registry_path)
        self.scanner = scanner or MediaScanner()
        self.directory = AssetDirectory(client)
        self.handshake = UploadHandshake(client, asset_folder_id=config.asset_folder_id)

    def sync(self, dry_run: bool = False) -> SyncResult:
        """Sync the media directory.

        Args:
            dry_run: If True, only report what would be uploaded

        Returns:
            SyncResult with the resolved assets and per-file outcomes

        Raises:
            OSError: If the media directory or registry cannot be read
            CorruptRegistryError: If the registry document is unreadable
            RemoteUnavailableError: If the remote directory cannot be fetched

        Examples:
            >>> engine = SyncEngine(client, config)  # doctest: +SKIP
            >>> result = engine.sync(dry_run=True)  # doctest: +SKIP
            >>> print(f"Would upload {len(result.planned)} files")  # doctest: +SKIP
        """
        media_dir = self.config.media_dir
        local_files = self.scanner.scan(media_dir)
        self.output.info(f"Found {len(local_files)} image(s) in {media_dir}")
        if dry_run:
            self.output.info("Dry run: No changes will be made")

        registry = self.store.load()
        snapshot = self._fetch_snapshot()

        comparator = AssetComparator(snapshot)
        result = SyncResult(dry_run=dry_run)

        for local_file in local_files:
            self._process_file(local_file, registry, comparator, result)

        if not dry_run:
            self.store.save(registry)
            save_asset_snapshot(self.config.snapshot_path, result.assets)
            self.output.info(f"Updated asset registry at {self.config.registry_path}")

        self._display_summary(result)
        return result

    def _fetch_snapshot(self) -> AssetSnapshot:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet,
        ) as progress:
            progress.add_task("Fetching existing assets from Storyblok...", total=None)
            snapshot = self.directory.list_all()
        self.output.info(f"Found {len(snapshot)} existing asset(s)")
        return snapshot

    def _process_file(
        self,
        local_file: LocalFile,
        registry: Registry,
        comparator: AssetComparator,
        result: SyncResult,
    ) -> None:
        """Resolve a single file, recording the outcome in ``result``."""
        try:
            fingerprint = compute_fingerprint(local_file.path)
        except OSError as e:
            self.output.warning(f"Cannot read {local_file.name}, skipping: {e}")
            result.failed.append(local_file.name)
            return

        self.output.print("")
        self.output.info(f"Processing {local_file.name}...")
        logger.debug(f"{local_file.name}: hash {short_fingerprint(fingerprint)}")

        decision = comparator.decide(
            local_file, fingerprint, registry.get(local_file.name)
        )
        if decision.divergent:
            self._report_divergent(decision)
            result.divergent.append(local_file.name)

        if decision.action == SyncAction.SKIP and decision.remote_asset is not None:
            self.output.info(
                f"  File unchanged, using existing asset "
                f"(ID: {decision.remote_asset.id})"
            )
            result.assets.append(
                ResolvedAsset.from_remote(decision.remote_asset, local_file.name)
            )
            result.skipped.append(local_file.name)
            return

        if result.dry_run:
            self.output.info(f"  Would upload ({decision.reason})")
            result.planned.append(local_file.name)
            return

        self._upload(decision, registry, result)

    def _upload(
        self, decision: SyncDecision, registry: Registry, result: SyncResult
    ) -> None:
        local_file = decision.local_file
        self.output.info(f"  Uploading {local_file.name} ({decision.reason})...")

        try:
            asset = self.handshake.upload(local_file)
        except UploadFailedError as e:
            logger.debug(f"Upload of {local_file.name} failed", exc_info=e.cause)
            self.output.error(
                f"Failed to upload {local_file.name}, continuing with next: {e}"
            )
            result.failed.append(local_file.name)
            return

        registry.assets[local_file.name] = RegistryEntry(
            remote_asset_id=asset.id,
            fingerprint=decision.fingerprint,
            remote_filename=asset.filename,
            uploaded_at=utc_timestamp(),
        )
        result.assets.append(ResolvedAsset.from_remote(asset, local_file.name))
        result.uploaded.append(local_file.name)
        self.output.success(f"Upload complete! Asset ID: {asset.id}")
        self.output.info(f"  URL: {asset.filename}")

        if self.config.checkpoint_each_upload:
            self.store.save(registry)

    def _report_divergent(self, decision: SyncDecision) -> None:
        asset = decision.divergent_asset
        if asset is None:
            return
        logger.info(
            f"{decision.local_file.name} matches remote asset {asset.id} by name "
            f"but its content is not the registered upload"
        )
        self.output.warning(
            f"Found existing asset with same name as {decision.local_file.name} "
            f"but different content (ID: {asset.id}); a new version will be created"
        )

    def _display_summary(self, result: SyncResult) -> None:
        """Display sync summary.

        Args:
            result: Outcome of the run
        """
        if result.dry_run:
            self.output.print_summary(
                "Dry run complete",
                [
                    ("Would upload", f"{len(result.planned)} files"),
                    ("Unchanged", f"{len(result.skipped)} files"),
                ],
            )
            return

        summary = [
            ("Uploaded", f"{len(result.uploaded)} files"),
            ("Skipped", f"{len(result.skipped)} files (unchanged)"),
        ]
        if result.failed:
            summary.append(("Failed", f"{len(result.failed)} files"))
        summary.append(("Total", f"{result.total} assets available"))
        self.output.print_summary("Sync complete", summary)
