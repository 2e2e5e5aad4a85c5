from typing import Protocol

from src.sdk.logger.log_record import LogRecord


class LogSink(Protocol):
    """
    Destination for log records.

    A LogSink may print, persist, buffer, filter or forward records
    to another sink or service.
    """

    def write(self, record: LogRecord) -> None:
        """
        Deliver one record.

        Raises a SinkError subclass on failure.
        Must be safe to call from several threads at once.
        """


def close_sink(sink: LogSink) -> None:
    # Sinks holding a resource (file handle, timer, HTTP session)
    # expose close(); the rest have nothing to release.
    close = getattr(sink, "close", None)
    if callable(close):
        close()


def sink_name(sink: object) -> str:
    return type(sink).__name__
