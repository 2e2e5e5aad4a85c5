"""rotating_file_log_sink.py

Size-bounded JSONL file sink.

Files on disk, newest first:

    <base>, <base>.1, <base>.2, ... <base>.<max_files - 1>

When the next line would push <base> past max_size, the files are
shifted one slot up, the oldest slot is evicted, and <base> is
reopened empty. At most max_files files are ever retained.
"""

from __future__ import annotations

import os
from pathlib import Path
import threading
from typing import BinaryIO, Optional

from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.sink_errors import EncodingError, RotationError, SinkWriteError


class RotatingFileLogSink:
    """
    JSONL file sink with size-based rotation.

    States: Open (handle valid, size tracked) and Rotating (transient,
    entirely inside write() under the sink lock, so concurrent writers
    never observe or interleave with a rotation).
    """

    def __init__(self, base_path: str | os.PathLike, max_size: int, max_files: int):
        if max_size <= 0:
            raise ValueError("max_size must be a positive number of bytes")
        if max_files < 1:
            raise ValueError("max_files must be at least 1")

        self._base_path = Path(base_path)
        self._max_size = max_size
        self._max_files = max_files
        self._lock = threading.Lock()

        self._file: Optional[BinaryIO] = None
        self._current_size = 0

        try:
            self._open_current_file()
        except OSError as e:
            raise SinkWriteError("RotatingFileLogSink", f"failed to open log file {self._base_path}: {e}") from e

    # -------------------------------------------------
    # Introspection
    # -------------------------------------------------
    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def current_size(self) -> int:
        with self._lock:
            return self._current_size

    def backup_path(self, index: int) -> Path:
        return self._base_path.with_name(f"{self._base_path.name}.{index}")

    # -------------------------------------------------
    # File handling
    # -------------------------------------------------
    def _open_current_file(self) -> None:
        self._base_path.parent.mkdir(parents=True, exist_ok=True)
        # Binary append: the tracked size must be the true byte count.
        self._file = open(self._base_path, "ab")
        self._current_size = os.fstat(self._file.fileno()).st_size

    def _rotate(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

        for i in range(self._max_files - 1, 0, -1):
            src = self.backup_path(i)
            if i == self._max_files - 1:
                try:
                    os.remove(src)
                except FileNotFoundError:
                    pass
            elif src.exists():
                os.replace(src, self.backup_path(i + 1))

        if self._base_path.exists():
            if self._max_files == 1:
                # No backup slots: the current file is the one evicted.
                os.remove(self._base_path)
            else:
                os.replace(self._base_path, self.backup_path(1))

        self._open_current_file()

    def _append(self, data: bytes) -> None:
        self._file.write(data)
        self._file.flush()
        os.fsync(self._file.fileno())
        self._current_size += len(data)

    # -------------------------------------------------
    # Sink API
    # -------------------------------------------------
    def write(self, record: LogRecord) -> None:
        try:
            data = record.to_json_bytes()
        except (TypeError, ValueError) as e:
            raise EncodingError("RotatingFileLogSink", f"failed to encode log record: {e}") from e

        with self._lock:
            if self._file is None:
                raise SinkWriteError("RotatingFileLogSink", f"log file {self._base_path} is closed")

            if self._current_size > 0 and self._current_size + len(data) > self._max_size:
                try:
                    self._rotate()
                except OSError as e:
                    written = self._recover_and_write(data)
                    raise RotationError(
                        "RotatingFileLogSink",
                        f"failed to rotate log file {self._base_path}: {e}",
                        line_written=written,
                    ) from e

            try:
                self._append(data)
            except OSError as e:
                raise SinkWriteError(
                    "RotatingFileLogSink", f"failed to write to log file {self._base_path}: {e}"
                ) from e

    def _recover_and_write(self, data: bytes) -> bool:
        """
        After a failed rotation, reopen the base file so the sink stays
        usable and keep the in-flight line. Returns True if it was written.
        """
        try:
            if self._file is None:
                self._open_current_file()
            self._append(data)
            return True
        except OSError:
            return False

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None
