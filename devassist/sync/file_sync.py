"""
File Synchronization Module
===========================

This module pushes the files of a local directory to a remote store,
uploading only content whose hash changed since the last pass and deleting
remote documents for files that no longer exist locally.
"""

import asyncio
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Set

from loguru import logger

from devassist.models import FileDocument, SyncResult, utc_now
from devassist.stores.base import RemoteStore, RemoteStoreError
from devassist.sync.scanner import DEFAULT_IGNORED, ScanReport, ScannedFile, scan_directory
from devassist.sync.state import SyncState, state_path


class FileSynchronizer:
    """Synchronizes a directory with the documents of one project on a remote store."""

    def __init__(
        self,
        project: str,
        directory: str | Path,
        store: RemoteStore,
        ignored: Iterable[str] = DEFAULT_IGNORED,
        persist_state: bool = True,
        prune_remote: bool = True,
        on_result: Optional[Callable[[SyncResult], None]] = None,
    ):
        """Initialize the FileSynchronizer.

        Args:
            project: Name of the remote project receiving the documents
            directory: Local directory to scan
            store: Remote store receiving uploads and deletions
            ignored: Path component names excluded from the scan
            persist_state: Keep the hash cache in the directory's state file
            prune_remote: Also delete remote documents left by earlier runs
            on_result: Called with the result of every completed pass
        """
        self.project = project
        self.directory = Path(directory).resolve()
        self.store = store
        self.ignored = tuple(ignored)
        self.persist_state = persist_state
        self.prune_remote = prune_remote
        self.on_result = on_result
        self.state_file = state_path(self.directory, project)
        if persist_state:
            self.state = SyncState.load(self.state_file, project)
        else:
            self.state = SyncState(project=project)
        self.last_result: Optional[SyncResult] = None
        self._running: bool = False
        self._errors: Dict[str, str] = {}
        self._pending_syncs: Set[str] = set()
        self._lock = asyncio.Lock()
        self._stop_event: Optional[asyncio.Event] = None

    def collect_changes(self, report: ScanReport) -> tuple[list[ScannedFile], list[str]]:
        """Split a scan into files needing upload and cached names now missing.

        Returns:
            tuple: (changed files, removed names)
        """
        changed = [
            scanned for scanned in report.files
            if self.state.hashes.get(scanned.name) != scanned.hash
        ]
        present = report.present
        removed = sorted(name for name in self.state.hashes if name not in present)
        return changed, removed

    async def sync_once(self) -> SyncResult:
        """Run one scan, upload and delete pass.

        Raises:
            RemoteStoreError: If the store rejects an operation. Uploads that
                already succeeded stay recorded in the cache.
        """
        async with self._lock:
            logger.info(f"Scanning directory: {self.directory}")
            report = await asyncio.to_thread(scan_directory, self.directory, self.ignored)
            changed, removed = self.collect_changes(report)
            result = SyncResult(
                skipped=list(report.skipped),
                unchanged=len(report.files) - len(changed),
            )

            try:
                if changed or removed:
                    logger.info(f"Syncing files to project {self.project}...")
                for scanned in changed:
                    await self._upload(scanned)
                    result.uploaded.append(scanned.name)

                stale = set(removed)
                if self.prune_remote:
                    remote_names = await asyncio.to_thread(self.store.list_names, self.project)
                    stale |= remote_names - report.present
                for name in sorted(stale):
                    await self._delete(name)
                    result.deleted.append(name)
            finally:
                result.finished_at = utc_now()
                if result.has_changes:
                    self.state.last_sync = result.finished_at
                if self.persist_state:
                    await asyncio.to_thread(self.state.save, self.state_file)

            if result.has_changes:
                logger.info(
                    f"Completed syncing files: {len(result.uploaded)} uploaded, "
                    f"{len(result.deleted)} deleted."
                )
            else:
                logger.info("No new or modified files to send.")

            self.last_result = result
            if self.on_result:
                self.on_result(result)
            return result

    async def _upload(self, scanned: ScannedFile) -> None:
        document = FileDocument(name=scanned.name, content=scanned.content, hash=scanned.hash)
        await self._call_store(scanned.name, self.store.upsert, self.project, document)
        self.state.hashes[scanned.name] = scanned.hash

    async def _delete(self, name: str) -> None:
        await self._call_store(name, self.store.delete, self.project, name)
        self.state.hashes.pop(name, None)

    async def _call_store(self, name: str, operation, *args) -> None:
        self._pending_syncs.add(name)
        try:
            await asyncio.to_thread(operation, *args)
            self._errors.pop(name, None)
        except RemoteStoreError as e:
            self._errors[name] = str(e)
            raise
        finally:
            self._pending_syncs.discard(name)

    async def run(
        self,
        interval: float,
        max_passes: Optional[int] = None,
        max_failures: int = 5,
    ) -> None:
        """Repeat sync passes every interval seconds until stopped.

        A failed pass is logged and retried on the next tick. The loop gives
        up and re-raises once more than max_failures passes fail in a row.
        """
        self._running = True
        self._stop_event = asyncio.Event()
        passes = 0
        failures = 0
        try:
            while self._running:
                try:
                    await self.sync_once()
                    failures = 0
                except (RemoteStoreError, OSError) as error:
                    failures += 1
                    logger.error(f"Synchronization pass failed ({failures}/{max_failures}): {error}")
                    if failures > max_failures:
                        raise
                passes += 1
                if max_passes is not None and passes >= max_passes:
                    break
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False

    async def stop(self) -> None:
        """Stop the run loop after the current pass."""
        self._running = False
        if self._stop_event is not None:
            self._stop_event.set()

    def get_status(self) -> dict:
        """Get the current status of file synchronization.

        Returns:
            dict: Status information including errors, pending syncs and last sync time
        """
        last_sync: Optional[datetime] = self.state.last_sync
        return {
            "project": self.project,
            "directory": str(self.directory),
            "running": self._running,
            "tracked_files": len(self.state.hashes),
            "errors": dict(self._errors),
            "pending_syncs": sorted(self._pending_syncs),
            "last_sync": last_sync.isoformat() if last_sync else None,
        }
