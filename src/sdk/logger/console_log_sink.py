import sys
import threading
from typing import Optional, TextIO

from src.sdk.logger.log_level import LogLevel
from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.sink_errors import SinkWriteError


class ConsoleLogSink:
    """
    Log sink that prints each record as one JSON line.

    ERROR records go to the error stream, everything else to
    standard output. A record whose context cannot be encoded is
    still printed, as a degraded line carrying the encoding error.
    """

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        # None means "the process stream at write time", which keeps
        # redirection (and pytest capture) working after construction.
        self._stdout = stdout
        self._stderr = stderr
        self._lock = threading.Lock()

    def _stream_for(self, record: LogRecord) -> TextIO:
        if record.level == LogLevel.ERROR:
            return self._stderr if self._stderr is not None else sys.stderr
        return self._stdout if self._stdout is not None else sys.stdout

    def write(self, record: LogRecord) -> None:
        try:
            line = record.to_json_line()
            # Lone surrogates pass json.dumps but not UTF-8.
            line.encode("utf-8")
        except (TypeError, ValueError) as e:
            line = record.degraded_line(e)

        stream = self._stream_for(record)
        try:
            with self._lock:
                stream.write(line)
                stream.flush()
        except (OSError, ValueError) as e:
            raise SinkWriteError("ConsoleLogSink", f"console stream write failed: {e}") from e
