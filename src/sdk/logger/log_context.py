from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional


class _Absent:
    """
    Marker returned by LogContext.read when a key was never attached.

    Distinct from None, which is a legitimate attached value.
    """

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


@dataclass(frozen=True)
class LogContext:
    """
    Structured key/value metadata bound to one request or operation.

    A LogContext is never mutated. attach() copies the parent's entries,
    overlays the new key and returns a derived handle, so contexts derived
    from a shared parent can be used concurrently without seeing each
    other's additions.
    """

    _values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def empty(cls) -> "LogContext":
        return cls()

    @classmethod
    def of(cls, values: Optional[Mapping[str, Any]] = None) -> "LogContext":
        return cls(MappingProxyType(dict(values or {})))

    def attach(self, key: str, value: Any) -> "LogContext":
        values = dict(self._values)
        values[key] = value
        return LogContext(MappingProxyType(values))

    def attach_all(self, values: Mapping[str, Any]) -> "LogContext":
        ctx = self
        for key, value in values.items():
            ctx = ctx.attach(key, value)
        return ctx

    def read(self, key: str, default: Any = ABSENT) -> Any:
        return self._values.get(key, default)

    @property
    def values(self) -> Mapping[str, Any]:
        # Read-only view; safe to share with every sink of a dispatch.
        return self._values

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


def ensure_context(ctx: Optional[LogContext | Mapping[str, Any]]) -> LogContext:
    """
    Absent context reads as empty; a plain mapping is snapshotted.
    """
    if ctx is None:
        return LogContext.empty()
    if isinstance(ctx, LogContext):
        return ctx
    if isinstance(ctx, Mapping):
        return LogContext.of(ctx)
    raise TypeError(f"log context must be a LogContext or a mapping, not {type(ctx).__name__}")
