import asyncio
import threading
from collections.abc import Iterable
from concurrent.futures import Future
from pathlib import Path
from typing import Optional

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from devassist.sync.file_sync import FileSynchronizer
from devassist.sync.scanner import DEFAULT_IGNORED, is_ignored


class FileMonitorError(Exception):
    """Base exception for file monitor errors."""


class DebouncedSyncHandler(FileSystemEventHandler):
    """
    Collects file system events below a root and fires a callback once the
    events have been quiet for debounce_time seconds.
    """

    def __init__(
        self,
        root: str | Path,
        callback,
        ignored: Iterable[str] = DEFAULT_IGNORED,
        debounce_time: float = 0.5,
    ) -> None:
        super().__init__()
        self.root = Path(root).resolve()
        self.callback = callback
        self.ignored = tuple(ignored)
        self.debounce_time = debounce_time
        self.pending_paths: set[str] = set()
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def _should_process_event(self, event: FileSystemEvent) -> bool:
        """Drop events outside the root or under an ignored path component."""
        paths = [event.src_path, getattr(event, "dest_path", "") or ""]
        for raw in paths:
            if not raw:
                continue
            try:
                relative = Path(str(raw)).resolve().relative_to(self.root)
            except ValueError:
                continue
            if str(relative) != "." and not is_ignored(relative, self.ignored):
                return True
        return False

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in ("opened", "closed", "closed_no_write"):
            return
        if event.is_directory and event.event_type == "modified":
            return
        if not self._should_process_event(event):
            return
        logger.debug(f"[Watcher] {event.event_type}: {event.src_path}")
        with self._lock:
            self.pending_paths.add(str(event.src_path))
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_time, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            paths = sorted(self.pending_paths)
            self.pending_paths.clear()
            self._timer = None
        if paths:
            self.callback(paths)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self.pending_paths.clear()


class SyncMonitor:
    """Runs a sync pass whenever files under the synchronizer's directory change."""

    def __init__(
        self,
        synchronizer: FileSynchronizer,
        loop: asyncio.AbstractEventLoop,
        debounce_time: float = 0.5,
    ) -> None:
        self.synchronizer = synchronizer
        self.loop = loop
        self.observer = Observer()
        self.handler = DebouncedSyncHandler(
            synchronizer.directory,
            self._on_changes,
            ignored=synchronizer.ignored,
            debounce_time=debounce_time,
        )
        self._is_running = False

    def _on_changes(self, paths: list[str]) -> None:
        logger.info(f"Detected changes in {len(paths)} path(s), synchronizing")
        future = asyncio.run_coroutine_threadsafe(self.synchronizer.sync_once(), self.loop)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Synchronization after file change failed: {error}")

    def start(self) -> None:
        """Start watching the directory recursively."""
        if self._is_running:
            logger.warning("Monitor is already running")
            return
        try:
            self.observer.schedule(self.handler, str(self.synchronizer.directory), recursive=True)
            self.observer.start()
        except Exception as error:
            raise FileMonitorError(f"Failed to start file monitor: {error}") from error
        self._is_running = True
        logger.info(f"Started monitoring {self.synchronizer.directory}")

    def stop(self) -> None:
        """Stop watching and drop any pending debounced events."""
        if not self._is_running:
            return
        self.handler.cancel()
        self.observer.stop()
        self.observer.join()
        self.observer = Observer()
        self._is_running = False
        logger.info("Stopped file monitor")

    def __enter__(self) -> "SyncMonitor":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
