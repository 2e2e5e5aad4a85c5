from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
import json
from typing import Any, Mapping, Optional

from src.sdk.logger.log_level import LogLevel

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class LogRecord:
    """
    Atomic, immutable unit dispatched to every sink.

    One instance is shared by reference across all sinks of a
    single dispatch; the context is a read-only view so no sink
    can change what the next one observes.
    """

    timestamp: datetime
    # Wall-clock time of the log call, second precision.

    level: LogLevel
    # Severity; drives console stream selection and filtering.

    message: str
    # Formatted human-readable text.

    context: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    # Snapshot of the caller's LogContext at the time of the call.

    @classmethod
    def create(
        cls,
        level: LogLevel,
        message: str,
        context: Optional[Mapping[str, Any]] = None,
        *,
        timestamp: Optional[datetime] = None,
    ) -> "LogRecord":
        if timestamp is None:
            timestamp = datetime.now()
        if context is None:
            context = MappingProxyType({})
        elif not isinstance(context, MappingProxyType):
            context = MappingProxyType(dict(context))
        return cls(
            timestamp=timestamp.replace(microsecond=0),
            level=LogLevel.parse(level),
            message=message,
            context=context,
        )

    @property
    def date(self) -> str:
        return self.timestamp.strftime(DATE_FORMAT)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "level": self.level.value,
            "message": self.message,
            "context": dict(self.context),
        }

    def encode(self) -> str:
        """
        Serialize to one compact JSON object (no trailing newline).

        Raises TypeError / ValueError when the context holds values
        that JSON cannot represent; sinks translate that into
        EncodingError or a degraded line.
        """
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    def to_json_line(self) -> str:
        return self.encode() + "\n"

    def to_json_bytes(self) -> bytes:
        """
        UTF-8 encoded JSON line.

        Also raises UnicodeEncodeError (a ValueError) for text that
        json.dumps accepts but UTF-8 cannot hold, such as lone surrogates.
        """
        return self.to_json_line().encode("utf-8")

    def degraded_line(self, error: Exception) -> str:
        """
        Fixed-format fallback used when the record cannot be encoded.
        Always representable in UTF-8.
        """
        fallback = {
            "date": self.date,
            "level": self.level.value,
            "message": _utf8_safe(str(self.message)),
            "context": {"error": _utf8_safe(str(error))},
        }
        return json.dumps(fallback, separators=(",", ":"), ensure_ascii=False) + "\n"

    @classmethod
    def decode(cls, line: str) -> "LogRecord":
        data = json.loads(line)
        return cls(
            timestamp=datetime.strptime(data["date"], DATE_FORMAT),
            level=LogLevel.parse(data["level"]),
            message=data["message"],
            context=MappingProxyType(dict(data.get("context") or {})),
        )


def _utf8_safe(text: str) -> str:
    return text.encode("utf-8", "backslashreplace").decode("utf-8")
