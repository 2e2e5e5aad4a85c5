"""
Module: logger_config.py
Location: src/sdk/logger/

Declarative logger configuration and the factory that turns it into
a Logger with its sinks wired in fallback order.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping, Optional

from src.sdk.logger.buffered_log_sink import BufferedLogSink
from src.sdk.logger.console_log_sink import ConsoleLogSink
from src.sdk.logger.file_log_sink import FileLogSink
from src.sdk.logger.filter_log_sink import FilterLogSink
from src.sdk.logger.log_level import LogLevel
from src.sdk.logger.log_manager import Logger
from src.sdk.logger.log_sink import LogSink
from src.sdk.logger.remote_log_sink import RemoteLogSink
from src.sdk.logger.rotating_file_log_sink import RotatingFileLogSink

ALL_LEVELS: tuple[LogLevel, ...] = tuple(LogLevel)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class LoggerConfigError(ValueError):
    pass


@dataclass(frozen=True)
class LoggerConfig:
    """
    Which sinks a service logger gets, and how they are tuned.
    """

    console: bool = True

    # File output (rotating when max_bytes is set)
    file_path: Optional[str] = None
    max_bytes: Optional[int] = None
    max_files: int = 5

    # Batching for the file sink
    buffer_capacity: Optional[int] = None
    flush_delay_s: float = 5.0

    # Levels forwarded to non-console sinks
    levels: tuple[LogLevel, ...] = ALL_LEVELS

    # Observatory push
    remote_base_uri: Optional[str] = None
    remote_timeout_s: Optional[float] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LoggerConfig":
        """
        Build a configuration from environment variables.

        Recognized variables:
        - LOG_CONSOLE: enable the console sink (default true)
        - LOG_FILE: path of the JSONL log file
        - LOG_MAX_BYTES / LOG_MAX_FILES: rotation bounds for LOG_FILE
        - LOG_BUFFER_SIZE / LOG_FLUSH_DELAY: batching for LOG_FILE
        - LOG_LEVELS: comma separated levels for file/remote sinks
        - LOG_REMOTE_URL / LOG_REMOTE_TIMEOUT: observatory push
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        return cls(
            console=_parse_bool(env, "LOG_CONSOLE", defaults.console),
            file_path=env.get("LOG_FILE") or None,
            max_bytes=_parse_number(env, "LOG_MAX_BYTES", int),
            max_files=_parse_number(env, "LOG_MAX_FILES", int) or defaults.max_files,
            buffer_capacity=_parse_number(env, "LOG_BUFFER_SIZE", int),
            flush_delay_s=_parse_number(env, "LOG_FLUSH_DELAY", float) or defaults.flush_delay_s,
            levels=_parse_levels(env.get("LOG_LEVELS")) or defaults.levels,
            remote_base_uri=env.get("LOG_REMOTE_URL") or None,
            remote_timeout_s=_parse_number(env, "LOG_REMOTE_TIMEOUT", float),
        )


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise LoggerConfigError(f"{name} must be a boolean, got {raw!r}")


def _parse_number(env: Mapping[str, str], name: str, kind: type):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = kind(raw.strip())
    except ValueError:
        raise LoggerConfigError(f"{name} must be a {kind.__name__}, got {raw!r}") from None
    if value <= 0:
        raise LoggerConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _parse_levels(raw: Optional[str]) -> tuple[LogLevel, ...]:
    if raw is None or raw.strip() == "":
        return ()
    try:
        return tuple(LogLevel.parse(part) for part in raw.split(",") if part.strip())
    except ValueError as e:
        raise LoggerConfigError(f"LOG_LEVELS: {e}") from None


def _restrict(sink: LogSink, levels: tuple[LogLevel, ...]) -> LogSink:
    if set(levels) >= set(ALL_LEVELS):
        return sink
    return FilterLogSink(sink, *levels)


def build_logger(config: Optional[LoggerConfig] = None) -> Logger:
    """
    Assemble a Logger from configuration.

    The console sink, when enabled, is registered first so it serves
    as the fallback channel for failures of the other sinks.
    """
    if config is None:
        config = LoggerConfig.from_env()

    sinks: list[LogSink] = []
    if config.console:
        sinks.append(ConsoleLogSink())

    if config.file_path:
        if config.max_bytes:
            file_sink: LogSink = RotatingFileLogSink(config.file_path, config.max_bytes, config.max_files)
        else:
            file_sink = FileLogSink(config.file_path)
        if config.buffer_capacity:
            file_sink = BufferedLogSink(file_sink, config.buffer_capacity, config.flush_delay_s)
        sinks.append(_restrict(file_sink, config.levels))

    if config.remote_base_uri:
        remote = RemoteLogSink(config.remote_base_uri, timeout=config.remote_timeout_s)
        sinks.append(_restrict(remote, config.levels))

    return Logger(sinks)
