from typing import Any, Optional


class SinkError(Exception):
    """
    Base failure raised by a log sink.

    The Logger catches these per sink, so one broken destination
    never aborts the fan-out to the others.
    """

    def __init__(self, sink: str, reason: str, details: Optional[Any] = None):
        self.sink = sink
        self.reason = reason
        self.details = details
        super().__init__(f"{sink}: {reason}")


class EncodingError(SinkError):
    pass


class SinkWriteError(SinkError):
    pass


class RotationError(SinkWriteError):
    def __init__(self, sink: str, reason: str, *, line_written: bool, details: Optional[Any] = None):
        self.line_written = line_written
        super().__init__(sink, reason, details)


class RemoteError(SinkError):
    def __init__(self, sink: str, reason: str, *, status_code: Optional[int] = None, details: Optional[Any] = None):
        self.status_code = status_code
        super().__init__(sink, reason, details)
