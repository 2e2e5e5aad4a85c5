from enum import Enum


class LogLevel(str, Enum):
    """
    Severity level carried by every log record.

    The value is the exact string written to the wire format,
    so records compare and serialize without translation.
    """

    INFO = "INFO"     # Normal operation
    WARN = "WARN"     # Unexpected but recoverable condition
    ERROR = "ERROR"   # Operation failed, caller continued

    @classmethod
    def parse(cls, value: "str | LogLevel") -> "LogLevel":
        if isinstance(value, LogLevel):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown log level: {value!r}") from None
