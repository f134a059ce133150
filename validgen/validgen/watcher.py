"""
File system watcher that regenerates output when the Go source changes.

- Watchdog-based monitoring of the source file's directory
- Debounced: editor save cycles trigger a single regeneration
- Content hashed: saves that do not change the file are ignored
"""

from __future__ import annotations

import hashlib
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer


def compute_file_hash(path: Path) -> str | None:
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except FileNotFoundError:
        return None


class SourceEventHandler(FileSystemEventHandler):
    """
    Tracks changes to a single source file.

    Events only mark the source dirty; ``flush_pending`` (called from the
    watch loop's thread) runs ``on_change`` once the debounce window passed.
    """

    DEBOUNCE_SECONDS = 0.5

    def __init__(self, source: Path, on_change: Callable[[Path], None]):
        super().__init__()
        self.source = source.resolve()
        self.on_change = on_change
        self.pending_since: float | None = None
        self.last_hash = compute_file_hash(self.source)

    def _is_source(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).resolve() == self.source

    def _touch(self) -> None:
        self.pending_since = time.time()

    def flush_pending(self, now: float | None = None) -> bool:
        """Run the callback if a change has settled. Returns True if it ran."""
        if self.pending_since is None:
            return False
        now = time.time() if now is None else now
        if now - self.pending_since < self.DEBOUNCE_SECONDS:
            return False

        self.pending_since = None
        new_hash = compute_file_hash(self.source)
        if new_hash is None or new_hash == self.last_hash:
            return False

        self.last_hash = new_hash
        self.on_change(self.source)
        return True

    def on_created(self, event: FileCreatedEvent) -> None:
        if not event.is_directory and self._is_source(event.src_path):
            self._touch()

    def on_modified(self, event: FileModifiedEvent) -> None:
        if not event.is_directory and self._is_source(event.src_path):
            self._touch()

    def on_moved(self, event: FileMovedEvent) -> None:
        # editors often save by writing a temp file and renaming it over the source
        if not event.is_directory and self._is_source(event.dest_path):
            self._touch()


def watch_source(source: Path, on_change: Callable[[Path], None]) -> tuple[Observer, SourceEventHandler]:
    """
    Start watching ``source``.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = SourceEventHandler(source, on_change)
    observer = Observer()
    observer.schedule(handler, str(handler.source.parent), recursive=False)
    observer.start()
    return observer, handler


def run_watch_loop(source: Path, on_change: Callable[[Path], None]) -> None:
    """Block, regenerating on change, until interrupted."""
    observer, handler = watch_source(source, on_change)
    try:
        while True:
            time.sleep(0.25)
            handler.flush_pending()
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()
