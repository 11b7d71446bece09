"""Note discovery: loads note files from a directory tree."""

import logging
import os
import queue
import threading
import time
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

import yaml

from note_indexer.core.models import FatalError, Note, NoteError, NotReadableError
from note_indexer.core.parsing import parse_note

logger = logging.getLogger(__name__)

# Upper bound on how long the collector sleeps before re-checking read deadlines
POLL_INTERVAL = 0.05


class DocumentStore:
    """Discovers and loads the notes under a root directory."""

    def __init__(
        self,
        root: Union[str, Path],
        note_extension: str = ".md",
        max_workers: Optional[int] = None,
        read_timeout: Optional[float] = 5.0,
        fail_fast: bool = False,
        exclude: Optional[Iterable[Path]] = None,
    ):
        """Initialize DocumentStore.

        Args:
            root: Directory to scan
            note_extension: File suffix considered a note
            max_workers: Reader threads for discover_all (default: min(32, cpu count + 4))
            read_timeout: Seconds a single read may run before it is abandoned
            fail_fast: Raise on the first unreadable file instead of recording it
            exclude: Files to leave out, such as a previously written index
        """
        self.root = Path(root)
        self.note_extension = note_extension
        self.max_workers = max_workers
        self.read_timeout = read_timeout
        self.fail_fast = fail_fast
        self.exclude = {Path(p).resolve() for p in (exclude or [])}
        self.errors: List[NoteError] = []

    def note_paths(self) -> List[Path]:
        """List note files under the root, sorted by identifier.

        Hidden files and anything inside hidden directories are skipped.
        Subdirectories that cannot be listed are recorded in `errors`.

        Raises:
            FatalError: If the root is missing, not a directory, or unreadable
        """
        if not self.root.exists():
            raise FatalError(f"Root directory not found: {self.root}")
        if not self.root.is_dir():
            raise FatalError(f"Root is not a directory: {self.root}")
        try:
            os.listdir(self.root)
        except OSError as e:
            raise FatalError(f"Cannot read root directory {self.root}: {e}") from e

        def on_error(error: OSError) -> None:
            path = Path(error.filename) if error.filename else self.root
            self._record_error(
                path, NotReadableError(path, f"directory not readable: {error.strerror or error}")
            )

        paths = []
        for dirpath, dirnames, filenames in os.walk(self.root, onerror=on_error):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith('.'))
            for filename in filenames:
                if filename.startswith('.') or not filename.endswith(self.note_extension):
                    continue
                path = Path(dirpath) / filename
                if not path.is_file() or path.resolve() in self.exclude:
                    continue
                paths.append(path)

        return sorted(paths, key=self.identifier_for)

    def identifier_for(self, path: Path) -> str:
        """Path relative to the root with '/' separators."""
        return Path(path).relative_to(self.root).as_posix()

    def load_note(self, path: Path) -> Note:
        """Read and parse a single note file.

        Raises:
            NotReadableError: If the file cannot be opened, decoded or parsed
        """
        try:
            text = path.read_text(encoding='utf-8-sig')
        except UnicodeDecodeError as e:
            raise NotReadableError(path, f"not valid UTF-8: {e}") from e
        except OSError as e:
            raise NotReadableError(path, e.strerror or str(e)) from e

        try:
            note = parse_note(self.identifier_for(path), text, path=path)
        except yaml.YAMLError as e:
            raise NotReadableError(path, f"invalid front-matter: {e}") from e

        logger.debug("Loaded %s (%d references)", note.identifier, len(note.references))
        return note

    def iter_notes(self) -> Iterator[Note]:
        """Lazily load notes one at a time in identifier order.

        Unreadable files are recorded in `errors` and skipped.
        """
        self.errors = []
        for path in self.note_paths():
            try:
                yield self.load_note(path)
            except NotReadableError as e:
                self._record_error(path, e)

    def discover_all(self) -> List[Note]:
        """Load every note, reading files on daemon reader threads.

        A read that runs longer than `read_timeout` is abandoned and recorded
        as unreadable; its thread is replaced so queued files still get read.
        Time spent waiting in the queue does not count against the timeout.

        Returns:
            Notes sorted by identifier
        """
        self.errors = []
        paths = self.note_paths()

        tasks: "queue.Queue[Path]" = queue.Queue()
        for path in paths:
            tasks.put(path)
        results: "queue.Queue[tuple]" = queue.Queue()
        started: Dict[Path, float] = {}
        lock = threading.Lock()
        stop = threading.Event()

        def read_loop() -> None:
            while not stop.is_set():
                try:
                    path = tasks.get_nowait()
                except queue.Empty:
                    return
                with lock:
                    started[path] = time.monotonic()
                try:
                    outcome = (path, self.load_note(path), None)
                except Exception as e:
                    outcome = (path, None, e)
                # A finished read is no longer subject to the timeout
                with lock:
                    started.pop(path, None)
                results.put(outcome)

        def start_reader() -> None:
            threading.Thread(target=read_loop, name="note-indexer-reader", daemon=True).start()

        workers = self.max_workers or min(32, (os.cpu_count() or 1) + 4)
        for _ in range(min(workers, len(paths))):
            start_reader()

        notes = []
        outstanding: Set[Path] = set(paths)
        try:
            while outstanding:
                try:
                    path, note, error = results.get(timeout=self._next_wait(started, outstanding, lock))
                except queue.Empty:
                    pass
                else:
                    if path in outstanding:
                        outstanding.discard(path)
                        if isinstance(error, NotReadableError):
                            self._record_error(path, error)
                        elif error is not None:
                            raise error
                        else:
                            notes.append(note)

                for path in self._expired(started, outstanding, lock):
                    outstanding.discard(path)
                    self._record_error(
                        path, NotReadableError(path, f"read timed out after {self.read_timeout}s")
                    )
                    # The hung reader keeps its thread; give the queue a fresh one
                    start_reader()
        finally:
            stop.set()

        notes.sort(key=lambda note: note.identifier)
        self.errors.sort(key=lambda error: error.identifier)
        logger.info(
            "Loaded %d notes from %s (%d unreadable)", len(notes), self.root, len(self.errors)
        )
        return notes

    def _next_wait(
        self, started: Dict[Path, float], outstanding: Set[Path], lock: threading.Lock
    ) -> Optional[float]:
        if self.read_timeout is None:
            return None
        now = time.monotonic()
        with lock:
            deadlines = [started[p] + self.read_timeout for p in outstanding if p in started]
        if not deadlines:
            return POLL_INTERVAL
        return max(0.0, min(min(deadlines) - now, POLL_INTERVAL))

    def _expired(
        self, started: Dict[Path, float], outstanding: Set[Path], lock: threading.Lock
    ) -> List[Path]:
        if self.read_timeout is None:
            return []
        now = time.monotonic()
        with lock:
            return sorted(
                p for p in outstanding
                if p in started and now - started[p] >= self.read_timeout
            )

    def _record_error(self, path: Path, error: NotReadableError) -> None:
        if self.fail_fast:
            raise error
        logger.warning("Skipping unreadable note %s: %s", path, error.reason)
        self.errors.append(
            NoteError(path=path, identifier=self.identifier_for(path), error=error.reason)
        )
