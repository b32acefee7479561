"""Append-only CSV access log store."""

import logging
import os
import threading

from models import HEADER, LogEntry

logger = logging.getLogger(__name__)


class LogStore:
    """Single owner of the access log file.

    Each append is one write() on a file opened in append mode, taken under a
    lock, so concurrent callers never interleave or truncate lines. read_all()
    takes the same lock and therefore never sees a half-written line.
    """

    def __init__(self, path: str):
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def ensure_file(self) -> bool:
        """Create the file with its header line. Returns True if it was created."""
        with self._lock:
            directory = os.path.dirname(self._path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            if os.path.exists(self._path) and os.path.getsize(self._path) > 0:
                return False
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(HEADER)
            return True

    def append(self, entry: LogEntry) -> None:
        """Append one record line. OSError propagates to the caller."""
        line = entry.to_line()
        with self._lock:
            if not os.path.exists(self._path):
                logger.warning(
                    "Access log %s is missing; recreating it without a header, "
                    "its first record will be read as the header", self._path,
                )
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(line)
                f.flush()

    def read_all(self, strict: bool = False) -> list[LogEntry]:
        """Return every record in file order, header excluded.

        A missing or unreadable file raises OSError.
        """
        with self._lock:
            with open(self._path, "r", encoding="utf-8") as f:
                data = f.read()

        lines = data.strip().split("\n")
        return [LogEntry.from_line(line, strict=strict) for line in lines[1:]]
