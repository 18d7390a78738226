"""
File system watcher feeding the output reconciler.

This module provides:
- Watchdog-based monitoring of every input root
- Moves split into a deletion and a creation
- Debounced flushing of pending observations
- A blocking watch loop that reconciles each flushed batch
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .changes import ChangeObservation, classify, coalesce
from .config import ReconcileConfig
from .reconciler import OutputReconciler, ReconcileResult

logger = logging.getLogger(__name__)


def _as_path(raw: str | bytes) -> Path:
    return Path(raw.decode() if isinstance(raw, bytes) else raw)


class ReconcileEventHandler(FileSystemEventHandler):
    """
    Collects file system events from the input roots as change observations.

    Key behaviors:
    - Opened/closed events are ignored; only content changes are tracked
    - A move becomes a deletion at the source and a creation at the destination
    - Hidden entries (any path part starting with ".") are skipped
    - Directory events are skipped unless include_directories is set
    - Observations become due once DEBOUNCE_SECONDS pass without newer events
    """

    DEBOUNCE_SECONDS = 0.5

    def __init__(self, roots: list[Path], include_directories: bool = False):
        """
        Initialize the event handler.

        Args:
            roots: Input roots being watched (absolute paths)
            include_directories: Forward directory events (they end a reconciliation pass)
        """
        super().__init__()
        self.roots = roots
        self.include_directories = include_directories
        self._lock = threading.Lock()
        self.pending: list[ChangeObservation] = []
        self._last_event = 0.0

    def _root_for(self, path: Path) -> Path | None:
        """Find the watched root containing `path`, skipping hidden entries."""
        for root in self.roots:
            try:
                rel = path.relative_to(root)
            except ValueError:
                continue
            if not rel.parts or any(part.startswith(".") for part in rel.parts):
                return None
            return root
        return None

    def _enqueue(self, path: Path, event_type: str, is_directory: bool) -> None:
        root = self._root_for(path)
        if root is None:
            return
        observation = ChangeObservation(root, path, event_type, is_directory)
        now = time.monotonic()
        with self._lock:
            self.pending.append(observation)
            self._last_event = now

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Translate a watchdog event into zero, one or two observations."""
        if event.is_directory and not self.include_directories:
            return
        if event.event_type == EVENT_TYPE_MOVED:
            self._enqueue(_as_path(event.src_path), EVENT_TYPE_DELETED, event.is_directory)
            self._enqueue(_as_path(event.dest_path), EVENT_TYPE_CREATED, event.is_directory)
        elif event.event_type in (EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED):
            # Modification events on directories only mean their listing changed
            if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
                return
            self._enqueue(_as_path(event.src_path), event.event_type, event.is_directory)

    def flush_pending(self, force: bool = False) -> list[ChangeObservation]:
        """
        Drain pending observations once the debounce window has passed.

        Returns the drained observations in arrival order (empty if still
        inside the debounce window).
        """
        with self._lock:
            if not self.pending:
                return []
            if not force and time.monotonic() - self._last_event < self.DEBOUNCE_SECONDS:
                return []
            drained = list(self.pending)
            self.pending.clear()
        return drained


def watch_inputs(
    roots: list[Path],
    include_directories: bool = False,
    recursive: bool = True,
) -> tuple[Observer, ReconcileEventHandler]:
    """
    Start watching the input roots.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = ReconcileEventHandler(roots, include_directories=include_directories)

    observer = Observer()
    for root in roots:
        if not root.is_dir():
            # Input roots belong to the compilers; never create them
            logger.warning("Input root %s does not exist; not watching it", root)
            continue
        observer.schedule(handler, str(root), recursive=recursive)
    observer.start()

    return observer, handler


def reconcile_batch(
    reconciler: OutputReconciler,
    observations: list[ChangeObservation],
) -> ReconcileResult:
    """Classify, coalesce and apply one batch of observations."""
    records = coalesce(classify(observations))
    return reconciler.reconcile(records)


def run_watch_loop(
    config: ReconcileConfig,
    on_result: Callable[[ReconcileResult], None] | None = None,
    include_directories: bool = False,
    poll_interval: float = 0.25,
) -> None:
    """
    Run the watch loop until interrupted.

    This is a blocking function. On Ctrl+C, pending observations are
    reconciled without waiting out the debounce window. Reconciliation
    errors propagate and end the loop; the observer is stopped either way.
    """
    roots = [Path(r) for r in config.inputs]
    reconciler = OutputReconciler(config.output_dir)
    observer, handler = watch_inputs(roots, include_directories=include_directories)
    logger.info("Watching %d input roots", len(roots))

    try:
        while True:
            time.sleep(poll_interval)
            observations = handler.flush_pending()
            if not observations:
                continue
            result = reconcile_batch(reconciler, observations)
            if on_result:
                on_result(result)
    except KeyboardInterrupt:
        # Apply what is still inside the debounce window before stopping
        observations = handler.flush_pending(force=True)
        if observations:
            result = reconcile_batch(reconciler, observations)
            if on_result:
                on_result(result)
    finally:
        observer.stop()
        observer.join()
