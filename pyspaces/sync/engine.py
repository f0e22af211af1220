"""Core sync engine that mirrors a local content directory into a bucket."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional, TypeVar

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..api import SpacesClient
from ..exceptions import SyncTimeoutError
from ..output import OutputFormatter
from ..utils import DEFAULT_CONTENT_DIR, DEFAULT_HASH_THRESHOLD, key_to_path
from .comparator import REASON_NEW, FileComparator, SyncAction, SyncDecision
from .operations import SyncOperations
from .scanner import DirectoryScanner, LocalFile, RemoteFile

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncEngine:
    """Core sync engine that orchestrates the prune and sync passes."""

    def __init__(
        self,
        client: SpacesClient,
        output: Optional[OutputFormatter] = None,
        lenient: bool = False,
    ):
        """Initialize sync engine.

        Args:
            client: Object store client
            output: Output formatter for displaying progress/status
            lenient: Treat every failed existence check or fetch as absence
                and skip unreadable local paths
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.operations = SyncOperations(client, lenient=lenient)
        self.scanner = DirectoryScanner(lenient=lenient)

    def sync(
        self,
        base_dir: Path,
        content_dir: str = DEFAULT_CONTENT_DIR,
        dry_run: bool = False,
        max_workers: int = 1,
        overwrite: bool = False,
        hash_threshold: Optional[int] = DEFAULT_HASH_THRESHOLD,
        timeout: Optional[float] = None,
    ) -> dict:
        """Mirror base_dir/content_dir into the bucket.

        The prune pass deletes every remote object without a local
        counterpart and completes before the sync pass uploads new and
        changed files.

        Args:
            base_dir: Base directory containing the content directory
            content_dir: Name of the directory mirrored to the bucket
            dry_run: If True, only show what would be done
            max_workers: Number of items processed concurrently (default: 1)
            overwrite: Replace changed objects with a single upload
            hash_threshold: Compare files of at least this size by digest
                (None disables)
            timeout: Overall deadline in seconds (None for no deadline)

        Returns:
            Dictionary with sync statistics

        Raises:
            ValueError: If the content directory is missing
            SpacesListError: If the bucket listing fails
            SyncTimeoutError: If the deadline is exceeded

        Examples:
            >>> engine = SyncEngine(client)
            >>> stats = engine.sync(Path("./site"), dry_run=True)
            >>> print(f"Would upload {stats['uploads']} files")
        """
        content_root = Path(base_dir) / content_dir
        if not content_root.exists():
            raise ValueError(f"Content directory does not exist: {content_root}")
        if not content_root.is_dir():
            raise ValueError(f"Content path is not a directory: {content_root}")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        deadline = time.monotonic() + timeout if timeout is not None else None
        comparator = FileComparator(hash_threshold=hash_threshold, overwrite=overwrite)
        stats = self._create_empty_stats()

        if not self.output.quiet:
            self.output.info(f"Syncing: {content_root} -> {self.client.bucket}")
            if dry_run:
                self.output.info("Dry run: No changes will be made")
            self.output.print("")

        start_time = time.time()

        # Step 1: Delete remote objects that have no local counterpart
        prune_decisions = self._prune_remote(
            content_root, comparator, dry_run, max_workers, deadline
        )
        self._tally(stats, prune_decisions)
        stats["remote_files"] = len(prune_decisions)
        logger.debug(f"Prune pass finished after {time.time() - start_time:.2f}s")

        # Step 2: Upload new and changed local files
        sync_decisions = self._sync_local(
            content_root, comparator, dry_run, max_workers, deadline
        )
        self._tally(stats, sync_decisions)
        stats["local_files"] = len(sync_decisions)
        logger.debug(f"Sync finished after {time.time() - start_time:.2f}s")

        if not self.output.quiet:
            self._display_summary(stats, dry_run)

        return stats

    def _create_empty_stats(self) -> dict:
        """Create an empty statistics dictionary.

        Returns:
            Dictionary with zero counts for all stat categories
        """
        return {
            "uploads": 0,
            "deletes": 0,
            "skips": 0,
            "local_files": 0,
            "remote_files": 0,
        }

    def _tally(self, stats: dict, results: list[list[SyncDecision]]) -> None:
        """Add the actions of processed items to stats."""
        for decisions in results:
            for decision in decisions:
                if decision.action == SyncAction.UPLOAD:
                    stats["uploads"] += 1
                elif decision.action == SyncAction.DELETE:
                    stats["deletes"] += 1
                elif decision.action == SyncAction.SKIP:
                    stats["skips"] += 1

    def _report(self, message: str) -> None:
        """Emit a per-item progress line."""
        logger.info(message)
        if not self.output.quiet:
            self.output.info(message)

    # =========================
    # Prune pass
    # =========================

    def _scan_remote(self) -> list[RemoteFile]:
        """List the bucket and drop directory markers."""
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet,
        ) as progress:
            task = progress.add_task("Listing remote objects...", total=None)
            objects = self.client.list_objects()
            remote_files = self.scanner.scan_remote(objects)
            progress.update(
                task, description=f"Found {len(remote_files)} remote file(s)"
            )

        filtered = len(objects) - len(remote_files)
        if filtered:
            logger.debug(f"Filtered out {filtered} directory marker(s)")
        return remote_files

    def _prune_remote(
        self,
        content_root: Path,
        comparator: FileComparator,
        dry_run: bool,
        max_workers: int,
        deadline: Optional[float],
    ) -> list[list[SyncDecision]]:
        """Delete remote objects whose local counterpart is missing.

        Args:
            content_root: Directory mirrored to the bucket
            comparator: Decision maker
            dry_run: If True, do not delete anything
            max_workers: Number of parallel workers
            deadline: Monotonic deadline or None

        Returns:
            Decisions per remote file
        """
        remote_files = self._scan_remote()

        def prune_one(remote_file: RemoteFile) -> list[SyncDecision]:
            try:
                local_path = key_to_path(remote_file.key, content_root)
            except ValueError:
                logger.debug(f"{remote_file.key!r} is not a canonical key")
                exists = False
            else:
                exists = self.operations.local_exists(local_path)
            decision = comparator.decide_remote(remote_file, exists)
            if decision.action == SyncAction.DELETE:
                self._report(f"Deleting {remote_file.key}")
                if not dry_run:
                    self.operations.delete_remote(remote_file.key)
                return [decision]
            return []

        return self._run_items(remote_files, prune_one, max_workers, deadline)

    # =========================
    # Sync pass
    # =========================

    def _scan_local(self, content_root: Path) -> list[LocalFile]:
        """Recursively list local files, sorted by key for readable logs."""
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet,
        ) as progress:
            scan_start = time.time()
            task = progress.add_task("Scanning local directory...", total=None)
            local_files = self.scanner.scan_local(content_root)
            progress.update(
                task, description=f"Found {len(local_files)} local file(s)"
            )
            logger.debug(
                f"Local scan took {time.time() - scan_start:.2f}s "
                f"for {len(local_files)} files"
            )
        return sorted(local_files, key=lambda f: f.key)

    def _sync_local(
        self,
        content_root: Path,
        comparator: FileComparator,
        dry_run: bool,
        max_workers: int,
        deadline: Optional[float],
    ) -> list[list[SyncDecision]]:
        """Upload every local file that is new or out of date.

        Returns:
            Decisions per local file
        """
        local_files = self._scan_local(content_root)

        def sync_one(local_file: LocalFile) -> list[SyncDecision]:
            return self._reconcile_file(local_file, comparator, dry_run)

        return self._run_items(local_files, sync_one, max_workers, deadline)

    def _reconcile_file(
        self, local_file: LocalFile, comparator: FileComparator, dry_run: bool
    ) -> list[SyncDecision]:
        """Fetch, compare and upload a single local file.

        Args:
            local_file: File to reconcile
            comparator: Decision maker
            dry_run: If True, do not mutate the bucket

        Returns:
            Decisions executed for this file, in order
        """
        action_start = time.time()
        content: Optional[bytes] = None

        if comparator.use_digest(local_file):
            remote_digest = self.operations.fetch_remote_digest(local_file.key)
            if remote_digest is None:
                decisions = comparator.decide_new(local_file)
            else:
                decisions = comparator.compare_digests(
                    local_file, self.operations.local_digest(local_file), remote_digest
                )
        else:
            remote_content = self.operations.fetch_remote(local_file.key)
            if remote_content is None:
                decisions = comparator.decide_new(local_file)
            else:
                content = local_file.read_bytes()
                decisions = comparator.compare_contents(
                    local_file, content, remote_content
                )

        self._execute(local_file, decisions, content, dry_run)

        logger.debug(
            f"Reconciled {local_file.key} in {time.time() - action_start:.2f}s"
        )
        return decisions

    def _execute(
        self,
        local_file: LocalFile,
        decisions: list[SyncDecision],
        content: Optional[bytes],
        dry_run: bool,
    ) -> None:
        """Execute the decisions for one file in order."""
        actions = [d.action for d in decisions]

        if actions == [SyncAction.SKIP]:
            self._report(f"{local_file.path} is up to date")
            return

        if decisions[0].reason == REASON_NEW:
            self._report(f"{local_file.path} is new! Uploading...")
        elif SyncAction.DELETE in actions:
            self._report(f"{local_file.path} is out of date. Deleting CDN copy...")
        else:
            self._report(f"{local_file.path} is out of date.")

        for decision in decisions:
            if decision.action == SyncAction.DELETE:
                if not dry_run:
                    self.operations.delete_remote(decision.key)
            elif decision.action == SyncAction.UPLOAD:
                if decision.reason != REASON_NEW:
                    self._report("Uploading local copy...")
                if not dry_run:
                    self.operations.upload_file(local_file, content=content)

    # =========================
    # Scheduling
    # =========================

    def _check_deadline(self, deadline: Optional[float]) -> None:
        """Raise SyncTimeoutError once the deadline has passed."""
        if deadline is not None and time.monotonic() > deadline:
            raise SyncTimeoutError("Sync exceeded its deadline")

    def _run_items(
        self,
        items: list[T],
        func: Callable[[T], list[SyncDecision]],
        max_workers: int,
        deadline: Optional[float],
    ) -> list[list[SyncDecision]]:
        """Run func over items, sequentially or with a bounded thread pool.

        Returns only after every submitted item has finished. The first
        failure cancels pending items and is re-raised.

        Args:
            items: Items to process
            func: Per-item operation
            max_workers: Number of parallel workers
            deadline: Monotonic deadline or None

        Returns:
            Results of func per item
        """
        results: list[list[SyncDecision]] = []

        if max_workers <= 1 or len(items) <= 1:
            for item in items:
                self._check_deadline(deadline)
                results.append(func(item))
            return results

        logger.debug(f"Processing {len(items)} item(s) with {max_workers} workers")

        def run_with_deadline(item: T) -> list[SyncDecision]:
            self._check_deadline(deadline)
            return func(item)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(run_with_deadline, item) for item in items]
            try:
                for future in as_completed(futures):
                    results.append(future.result())
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        return results

    def _display_summary(self, stats: dict, dry_run: bool) -> None:
        """Display sync summary.

        Args:
            stats: Statistics dictionary
            dry_run: Whether this was a dry run
        """
        self.output.print("")
        if dry_run:
            self.output.success("Dry run complete!")
        else:
            self.output.success("Sync complete!")

        total_actions = stats["uploads"] + stats["deletes"]
        if total_actions > 0:
            self.output.info(f"Total actions: {total_actions}")
            if stats["uploads"] > 0:
                self.output.info(f"  Uploaded: {stats['uploads']}")
            if stats["deletes"] > 0:
                self.output.info(f"  Deleted: {stats['deletes']}")
        else:
            self.output.info("No changes needed - everything is in sync!")
