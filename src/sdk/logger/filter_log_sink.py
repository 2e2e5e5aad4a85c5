from src.sdk.logger.log_level import LogLevel
from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.log_sink import LogSink, close_sink


class FilterLogSink:
    """
    Decorator sink that forwards only records whose level is allowed.
    """

    def __init__(self, sink: LogSink, *levels: "LogLevel | str"):
        self._sink = sink
        self._levels = frozenset(LogLevel.parse(level) for level in levels)

    @property
    def sink(self) -> LogSink:
        return self._sink

    @property
    def levels(self) -> frozenset:
        return self._levels

    def write(self, record: LogRecord) -> None:
        if record.level in self._levels:
            self._sink.write(record)

    def close(self) -> None:
        close_sink(self._sink)
