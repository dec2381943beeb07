"""Core sync engine for executing sync operations."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, TypeVar

from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..api import SparkClient
from ..config import SyncConfig
from ..exceptions import SparkAPIError
from ..models import LocalRecord, RemoteInventory, SyncResult
from ..output import OutputFormatter
from .comparator import DiffEngine, DiffResult, ToAdd, ToDelete, ToUpdate
from .operations import SyncOperations
from .remote import RemoteInventoryFetcher
from .report import SyncReporter
from .scanner import DirectoryScanner, GitTimestampResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures of a single item; anything else is a bug and propagates
ITEM_ERRORS = (SparkAPIError, OSError)


class SyncEngine:
    """Core sync engine that reconciles a directory with a codex."""

    def __init__(
        self,
        client: SparkClient,
        output: Optional[OutputFormatter] = None,
        max_workers: int = 1,
    ):
        """Initialize sync engine.

        Args:
            client: Spark API client
            output: Output formatter for displaying progress/status
            max_workers: Parallel workers per execution phase (default: 1)
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.reporter = SyncReporter(self.output)
        self.max_workers = max_workers

    @contextmanager
    def _spinner(self, description: str) -> Iterator[None]:
        if self.output.quiet:
            yield
            return
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=self.output.console,
        ) as progress:
            progress.add_task(description, total=None)
            yield

    def sync(self, config: SyncConfig) -> SyncResult:
        """Run a full sync: fetch, scan, diff, preview, execute.

        Args:
            config: Settings for this run

        Returns:
            SyncResult with the achieved counts

        Raises:
            SyncConfigError: If the directory does not exist
            SparkAPIError: If the remote inventory cannot be listed

        Examples:
            >>> engine = SyncEngine(client)
            >>> result = engine.sync(config)
            >>> print(f"Uploaded {result.files_added} new file(s)")
        """
        # Checked before any network activity
        config.check_directory()

        self.reporter.show_header(config.codex_id, config.directory)

        inventory = self.fetch_remote(config.codex_id)
        local_records = self.scan_local(
            config.directory, config.file_extensions, use_git=config.use_git
        )

        self.output.info("Computing diff...")
        diff = DiffEngine().compare(inventory.records, local_records)
        self.reporter.show_diff(
            diff, delete_removed=config.delete_removed, dry_run=config.dry_run
        )

        result = self.execute(
            diff,
            config.codex_id,
            dry_run=config.dry_run,
            delete_removed=config.delete_removed,
        )
        self.reporter.show_results(result)
        return result

    def fetch_remote(self, codex_id: str) -> RemoteInventory:
        """Fetch the validated remote inventory."""
        self.output.info("Fetching content inventory from Codex...")
        start = time.time()
        with self._spinner("Fetching Codex inventory..."):
            inventory = RemoteInventoryFetcher(self.client, codex_id).fetch()
        logger.debug("Remote inventory took %.2fs", time.time() - start)
        self.reporter.show_remote_inventory(inventory)
        return inventory

    def scan_local(
        self, directory: Path, extensions: Sequence[str], use_git: bool = True
    ) -> list[LocalRecord]:
        """Scan the local directory for files with allowed extensions."""
        self.output.info(f"Scanning local directory: {escape(str(directory))}")
        start = time.time()
        scanner = DirectoryScanner(
            extensions, timestamp_resolver=GitTimestampResolver(enabled=use_git)
        )
        with self._spinner("Scanning local directory..."):
            records = scanner.scan(directory)
        logger.debug(
            "Local scan took %.2fs for %d files", time.time() - start, len(records)
        )
        self.reporter.show_local_inventory(len(records))
        return records

    def execute(
        self,
        diff: DiffResult,
        codex_id: str,
        dry_run: bool = False,
        delete_removed: bool = True,
    ) -> SyncResult:
        """Apply a diff to the codex.

        Phases run in order: deletes (only if ``delete_removed``), updates
        (delete then upload), adds. Every item is attempted regardless of
        earlier failures.

        Args:
            diff: Diff partition to apply
            codex_id: Codex that receives uploads
            dry_run: If True, make no remote calls and return zero counts
            delete_removed: Whether remote-only items are deleted

        Returns:
            SyncResult; ``errors`` counts the items whose remote call failed
        """
        if dry_run:
            return SyncResult(dry_run=True)

        operations = SyncOperations(self.client, codex_id)
        result = SyncResult(files_unchanged=len(diff.unchanged))

        if delete_removed:
            deleted, failed = self._run_phase(
                diff.to_delete, lambda entry: self._delete_item(operations, entry)
            )
            result.files_deleted = deleted
            result.errors += failed

        updated, failed = self._run_phase(
            diff.to_update, lambda entry: self._update_item(operations, entry)
        )
        result.files_updated = updated
        result.errors += failed

        added, failed = self._run_phase(
            diff.to_add, lambda entry: self._add_item(operations, entry)
        )
        result.files_added = added
        result.errors += failed

        return result

    def _run_phase(
        self, entries: Sequence[T], action: Callable[[T], bool]
    ) -> tuple[int, int]:
        """Run an action for every entry and count outcomes.

        Returns:
            Tuple of (succeeded, failed)
        """
        if not entries:
            return 0, 0

        if self.max_workers <= 1 or len(entries) == 1:
            outcomes = [action(entry) for entry in entries]
        else:
            logger.debug(
                "Executing %d actions with %d workers", len(entries), self.max_workers
            )
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(action, entry) for entry in entries]
                outcomes = [future.result() for future in as_completed(futures)]

        succeeded = sum(1 for ok in outcomes if ok)
        return succeeded, len(outcomes) - succeeded

    def _delete_item(self, operations: SyncOperations, entry: ToDelete) -> bool:
        self.output.info(f"Deleting: {escape(entry.identifier)}")
        try:
            operations.delete_remote(entry.remote_id)
        except ITEM_ERRORS as e:
            logger.debug("Delete of %s failed: %s", entry.identifier, e)
            self.output.error(
                f"Failed to delete: {escape(entry.identifier)} ({escape(str(e))})"
            )
            return False
        self.output.success(f"Deleted: {escape(entry.identifier)}")
        return True

    def _update_item(self, operations: SyncOperations, entry: ToUpdate) -> bool:
        self.output.info(f"Updating: {escape(entry.identifier)}")
        try:
            operations.delete_remote(entry.remote_id)
        except ITEM_ERRORS as e:
            logger.debug("Delete before update of %s failed: %s", entry.identifier, e)
            self.output.warning(
                f"Failed to delete existing: {escape(entry.identifier)} "
                "(continuing with upload)"
            )

        try:
            operations.upload(entry.path)
        except ITEM_ERRORS as e:
            logger.debug("Upload of %s failed: %s", entry.path, e)
            self.output.error(
                f"Failed to upload: {escape(entry.identifier)} ({escape(str(e))})"
            )
            return False
        self.output.success(f"Updated: {escape(entry.identifier)}")
        return True

    def _add_item(self, operations: SyncOperations, entry: ToAdd) -> bool:
        self.output.info(f"Adding: {escape(entry.identifier)}")
        try:
            operations.upload(entry.path)
        except ITEM_ERRORS as e:
            logger.debug("Upload of %s failed: %s", entry.path, e)
            self.output.error(
                f"Failed to upload: {escape(entry.identifier)} ({escape(str(e))})"
            )
            return False
        self.output.success(f"Added: {escape(entry.identifier)}")
        return True
