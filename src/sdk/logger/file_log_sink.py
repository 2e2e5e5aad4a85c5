import os
from pathlib import Path
import threading

from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.sink_errors import EncodingError, SinkWriteError


class FileLogSink:
    """
    Log sink that persists records to an append-only JSONL file.

    Each LogRecord is written as a single JSON object per line and
    synced to disk before write() returns.
    """

    def __init__(self, logfile_path: str | os.PathLike):
        self._path = Path(logfile_path)
        self._lock = threading.Lock()

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # Binary append: encoding happens up front, where it can be reported.
            self._file = open(self._path, "ab")
        except OSError as e:
            raise SinkWriteError("FileLogSink", f"failed to open log file {self._path}: {e}") from e

    @property
    def path(self) -> Path:
        return self._path

    def write(self, record: LogRecord) -> None:
        """
        Persist a record to disk.
        """
        try:
            data = record.to_json_bytes()
        except (TypeError, ValueError) as e:
            raise EncodingError("FileLogSink", f"failed to encode log record: {e}") from e

        with self._lock:
            if self._file.closed:
                raise SinkWriteError("FileLogSink", f"log file {self._path} is closed")
            try:
                self._file.write(data)
                self._file.flush()
                os.fsync(self._file.fileno())
            except OSError as e:
                raise SinkWriteError("FileLogSink", f"failed to write to log file {self._path}: {e}") from e

    def close(self) -> None:
        """
        Close the underlying file handle.
        """
        with self._lock:
            if not self._file.closed:
                self._file.close()
