import threading
from typing import TextIO

from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.sink_errors import SinkWriteError


class WriterLogSink:
    """
    Log sink that appends JSON lines to any text stream
    (io.StringIO, an already open file, a socket file object).
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream

    def write(self, record: LogRecord) -> None:
        try:
            line = record.to_json_line()
            # Lone surrogates pass json.dumps but not UTF-8.
            line.encode("utf-8")
        except (TypeError, ValueError) as e:
            line = record.degraded_line(e)

        try:
            with self._lock:
                self._stream.write(line)
        except (OSError, ValueError) as e:
            raise SinkWriteError("WriterLogSink", f"stream write failed: {e}") from e
