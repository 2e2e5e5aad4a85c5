from __future__ import annotations

from dataclasses import dataclass
import itertools
import sys
import threading
from typing import Any, Iterable, Mapping, Optional

from src.sdk.logger.console_log_sink import ConsoleLogSink
from src.sdk.logger.log_context import LogContext, ensure_context
from src.sdk.logger.log_level import LogLevel
from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.log_sink import LogSink, close_sink, sink_name

SINK_ERROR_MESSAGE = "Logger sink error"
RECORD_ERROR_MESSAGE = "Logger record error"

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class SinkHandle:
    """
    Opaque token returned by Logger.add_sink and used to remove
    exactly that registration, even when two sinks compare equal.
    """

    id: int

    def __repr__(self) -> str:
        return f"SinkHandle({self.id})"


def format_message(fmt: str, args: tuple) -> str:
    if not args:
        return fmt
    try:
        return fmt % args
    except (TypeError, ValueError, KeyError):
        return f"{fmt} {args!r}"


class Logger:
    """
    Central coordinator for logging.

    Builds one LogRecord per call and fans it out to every
    registered sink in registration order. A failing sink is
    reported through the first sink (the fallback channel) and,
    if that fails too, straight to stderr. Logging calls never
    raise into the caller.
    """

    def __init__(self, sinks: Optional[Iterable[LogSink]] = None):
        if sinks is None:
            sinks = [ConsoleLogSink()]
        self._lock = threading.Lock()
        # Copy-on-write: dispatch iterates whatever tuple it grabbed,
        # mutations build and swap in a new one under the lock.
        self._registry: tuple[tuple[SinkHandle, LogSink], ...] = tuple(
            (SinkHandle(next(_handle_ids)), sink) for sink in sinks
        )

    @classmethod
    def with_sinks(cls, *sinks: LogSink) -> "Logger":
        return cls(list(sinks))

    # -------------------------------------------------
    # Sink registry
    # -------------------------------------------------
    def add_sink(self, sink: LogSink) -> SinkHandle:
        handle = SinkHandle(next(_handle_ids))
        with self._lock:
            self._registry = self._registry + ((handle, sink),)
        return handle

    def remove_sink(self, handle: SinkHandle) -> bool:
        with self._lock:
            remaining = tuple(entry for entry in self._registry if entry[0] != handle)
            removed = len(remaining) != len(self._registry)
            self._registry = remaining
        return removed

    def list_sinks(self) -> list[LogSink]:
        return [sink for _, sink in self._registry]

    def list_handles(self) -> list[SinkHandle]:
        return [handle for handle, _ in self._registry]

    # -------------------------------------------------
    # Context helpers
    # -------------------------------------------------
    def attach(self, ctx: Optional[LogContext], key: str, value: Any) -> LogContext:
        return ensure_context(ctx).attach(key, value)

    def attach_all(self, ctx: Optional[LogContext], values: Mapping[str, Any]) -> LogContext:
        return ensure_context(ctx).attach_all(values)

    def read(self, ctx: Optional[LogContext], key: str) -> Any:
        return ensure_context(ctx).read(key)

    # -------------------------------------------------
    # Logging
    # -------------------------------------------------
    def info(self, ctx: Optional[LogContext], fmt: str, *args: Any) -> None:
        self.log(ctx, LogLevel.INFO, fmt, *args)

    def warn(self, ctx: Optional[LogContext], fmt: str, *args: Any) -> None:
        self.log(ctx, LogLevel.WARN, fmt, *args)

    def error(self, ctx: Optional[LogContext], fmt: str, *args: Any) -> None:
        self.log(ctx, LogLevel.ERROR, fmt, *args)

    def log(self, ctx: Optional[LogContext], level: LogLevel, fmt: str, *args: Any) -> None:
        """
        Submit one log event to every registered sink.

        Never raises, whatever the sinks or the arguments do.
        """
        try:
            record = LogRecord.create(
                level,
                format_message(fmt, args),
                ensure_context(ctx).values,
            )
        except Exception as e:
            # No record to dispatch; a sink cannot report this either.
            self._last_resort(e, RECORD_ERROR_MESSAGE)
            return
        self.dispatch(record)

    def dispatch(self, record: LogRecord) -> None:
        registry = self._registry
        for _, sink in registry:
            try:
                sink.write(record)
            except Exception as e:
                self._report_sink_failure(registry, sink, e)

    def _report_sink_failure(
        self,
        registry: tuple[tuple[SinkHandle, LogSink], ...],
        failed: LogSink,
        error: Exception,
    ) -> None:
        # Reported through the first sink only, never re-dispatched.
        if not registry:
            self._last_resort(error)
            return

        fallback = registry[0][1]
        report = LogRecord.create(
            LogLevel.ERROR,
            SINK_ERROR_MESSAGE,
            {"error": str(error), "sink": sink_name(failed)},
        )
        try:
            fallback.write(report)
        except Exception:
            self._last_resort(error)

    @staticmethod
    def _last_resort(error: Exception, prefix: str = SINK_ERROR_MESSAGE) -> None:
        try:
            print(f"{prefix}: {error}", file=sys.stderr, flush=True)
        except (OSError, ValueError):
            # stderr itself is gone; there is nowhere left to report.
            pass

    # -------------------------------------------------
    # Shutdown
    # -------------------------------------------------
    def close(self) -> None:
        """
        Release every sink that holds a resource.
        """
        registry = self._registry
        for _, sink in registry:
            try:
                close_sink(sink)
            except Exception as e:
                self._report_sink_failure(registry, sink, e)
