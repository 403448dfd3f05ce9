"""
wordwatch/ingestion/watcher.py
──────────────────────────────
Watches one directory with watchdog and turns every newly created text file
into a word-frequency report:

    created event → Debouncer(key=path) → WordAnalyzer → write_report

Errors from the watch layer skip the debouncer and go straight to the log.
"""

from __future__ import annotations

import enum, logging, os, pathlib, threading
from typing import Callable, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler, PatternMatchingEventHandler
from watchdog.observers import Observer

from wordwatch.analysis.report import write_report
from wordwatch.analysis.word_counter import WordAnalyzer
from wordwatch.config import CONFIG
from wordwatch.errors import (
    FileAccessError, InvalidTargetError, WatchFacilityError, log_exception_chain,
)
from wordwatch.ingestion.debounce import Debouncer

LOG = logging.getLogger(__name__)

PathLike = Union[str, pathlib.Path]


class WatchState(enum.Enum):
    IDLE = "idle"
    WATCHING = "watching"
    STOPPED = "stopped"


class _Handler(PatternMatchingEventHandler):
    """Forwards matching file creations; reports faults instead of raising.

    Name matching is case-insensitive, so *.txt also catches NOTES.TXT.
    """

    def __init__(self, root: pathlib.Path, pattern: str,
                 on_created: Callable[[str], None],
                 on_error: Callable[[WatchFacilityError], None]):
        super().__init__(patterns=[pattern], ignore_directories=True, case_sensitive=False)
        self.root = root
        self._on_created = on_created
        self._on_error = on_error

    def dispatch(self, event: FileSystemEvent) -> None:
        try:
            if event.is_directory and self._is_root(event.src_path):
                # the watched folder never matches the file pattern
                FileSystemEventHandler.dispatch(self, event)
            else:
                super().dispatch(event)
        except Exception as e:
            err = WatchFacilityError(
                f"Failed to handle {event.event_type} event for {os.fsdecode(event.src_path)}"
            )
            err.__cause__ = e
            self._on_error(err)

    def on_created(self, event: FileSystemEvent) -> None:
        self._on_created(os.fsdecode(event.src_path))

    def _is_root(self, src_path) -> bool:
        return pathlib.Path(os.fsdecode(src_path)) == self.root

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory and self._is_root(event.src_path):
            self._on_error(WatchFacilityError(f"Watched directory was removed: {self.root}"))

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory and self._is_root(event.src_path):
            self._on_error(WatchFacilityError(f"Watched directory was moved: {self.root}"))


def validate_target(path: Optional[PathLike]) -> pathlib.Path:
    """
    Resolve *path* and make sure it is a readable, traversable directory.

    Raises:
        InvalidTargetError: If the path is empty, missing, not a directory
            or not accessible
    """
    if path is None or not str(path).strip():
        raise InvalidTargetError("No directory given.")
    target = pathlib.Path(str(path).strip()).expanduser()
    if not target.is_dir():
        raise InvalidTargetError(f"Directory does not exist: {path}")
    if not os.access(target, os.R_OK | os.X_OK):
        raise InvalidTargetError(f"Directory is not accessible: {path}")
    return target.resolve()


class DirectoryWatcher:
    """
    Coordinates the watch subscription, the debouncer and report generation.

    Args:
        analyzer: Produces reports (defaults to a configured WordAnalyzer)
        debouncer: Coalesces bursts per file path
        delay: Quiet period before a file is processed (debounce.delay_seconds)
        pattern: Glob matched against file names (watch.pattern)
        recursive: Also watch sub-directories (watch.recursive)
        report_extension: Extension of the report file (report.extension)
        on_report: Called with the report path after each successful write
        observer_factory: Builds the watchdog observer
    """

    def __init__(self,
                 analyzer: Optional[WordAnalyzer] = None,
                 debouncer: Optional[Debouncer] = None,
                 delay: Optional[float] = None,
                 pattern: Optional[str] = None,
                 recursive: Optional[bool] = None,
                 report_extension: Optional[str] = None,
                 on_report: Optional[Callable[[pathlib.Path], None]] = None,
                 observer_factory: Callable[[], Observer] = Observer):
        self.analyzer = analyzer or WordAnalyzer()
        self.debouncer = debouncer or Debouncer()
        self.delay = delay if delay is not None else CONFIG.get("debounce.delay_seconds", 4.0)
        self.pattern = pattern or CONFIG.get("watch.pattern", "*.txt")
        self.recursive = bool(CONFIG.get("watch.recursive", False) if recursive is None else recursive)
        self.report_extension = report_extension or CONFIG.get("report.extension", ".json")
        self.on_report = on_report
        self._observer_factory = observer_factory
        self._observer = None
        self._directory: Optional[pathlib.Path] = None
        self._state = WatchState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def directory(self) -> Optional[pathlib.Path]:
        return self._directory

    # ── lifecycle ───────────────────────────────────────────────────────────
    def start(self, path: PathLike) -> None:
        """
        Begin watching *path* for new files matching the pattern.

        Raises:
            InvalidTargetError: If *path* is not an accessible directory, the
                watch could not be registered, or a watch is already running
        """
        target = validate_target(path)
        with self._lock:
            if self._state is WatchState.WATCHING:
                raise InvalidTargetError(f"Already watching {self._directory}")

            handler = _Handler(target, self.pattern, self._on_created, self._on_error)
            observer = self._observer_factory()
            try:
                observer.schedule(handler, str(target), recursive=self.recursive)
                observer.start()
            except OSError as e:
                raise InvalidTargetError(f"Cannot watch {target}: {e}") from e

            self._observer = observer
            self._directory = target
            self._state = WatchState.WATCHING
        LOG.info("Monitoring directory: %s", target)

    def stop(self) -> None:
        """
        Release the watch subscription. Safe to call repeatedly.

        Files already detected keep their pending wait and still get a report.
        """
        with self._lock:
            observer, self._observer = self._observer, None
            was_watching = self._state is WatchState.WATCHING
            self._state = WatchState.STOPPED

        if observer is not None:
            observer.stop()
            observer.join(timeout=2)
        if was_watching:
            pending = self.debouncer.pending_count
            LOG.info("Stopped monitoring directory: %s (%d file(s) still pending)",
                     self._directory, pending)

    def __enter__(self) -> "DirectoryWatcher":
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    # ── event routing ───────────────────────────────────────────────────────
    def _on_created(self, path: str) -> None:
        LOG.debug("Create event for %s", path)
        self.debouncer.schedule(path, self.delay, lambda: self.process_file(path))

    def _on_error(self, err: WatchFacilityError) -> None:
        log_exception_chain(LOG, err)

    def process_file(self, path: PathLike) -> Optional[pathlib.Path]:
        """
        Analyze *path* and write its report.

        Returns:
            The report path, or None if the file could not be analyzed or the
            report could not be written
        """
        path = pathlib.Path(path)
        LOG.info("File '%s' created in directory.", path.name)
        try:
            report = self.analyzer.analyze(path)
        except FileAccessError as e:
            LOG.error("Error processing file: %s", e)
            return None

        written = write_report(report, path, self.report_extension)
        if written is None:
            return None

        if self.on_report is not None:
            self.on_report(written)
        return written
