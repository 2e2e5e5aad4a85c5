import json

import pytest
import requests

from src.sdk.logger.log_context import LogContext
from src.sdk.logger.log_level import LogLevel
from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.remote_log_sink import RemoteLogSink
from src.sdk.logger.sink_errors import EncodingError, RemoteError


class FakeResponse:
    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """
    Stand-in for requests.Session that records every POST.
    """

    def __init__(self, status_code: int = 200, error: Exception | None = None):
        self.status_code = status_code
        self.error = error
        self.calls: list[dict] = []
        self.responses: list[FakeResponse] = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        response = FakeResponse(self.status_code, "Internal Server Error" if self.status_code >= 500 else "")
        self.responses.append(response)
        return response

    def close(self) -> None:
        self.closed = True


def _record() -> LogRecord:
    ctx = LogContext.of({"request_id": "r-42"})
    return LogRecord.create(LogLevel.WARN, "slow request", ctx.values)


def test_posts_batch_of_one() -> None:
    session = FakeSession()
    sink = RemoteLogSink("https://observatory.example.com/", session=session)

    sink.write(_record())

    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://observatory.example.com/api/v1/observatory/logs"
    assert call["headers"] == {"Content-Type": "application/json"}
    assert call["timeout"] is None
    assert json.loads(call["data"]) == {
        "logs": [
            {
                "message": "slow request",
                "logLevel": "WARN",
                "data": {"request_id": "r-42"},
                "module": None,
                "submodule": None,
            }
        ]
    }
    assert session.responses[0].closed


def test_timeout_is_passed_through() -> None:
    session = FakeSession()
    RemoteLogSink("http://localhost:8080", timeout=2.5, session=session).write(_record())

    assert session.calls[0]["timeout"] == 2.5


@pytest.mark.parametrize("status", [201, 204, 400, 500])
def test_non_200_status_is_remote_error(status) -> None:
    sink = RemoteLogSink("http://localhost", session=FakeSession(status_code=status))

    with pytest.raises(RemoteError) as info:
        sink.write(_record())
    assert info.value.status_code == status


def test_transport_failure_is_remote_error() -> None:
    error = requests.ConnectionError("connection refused")
    sink = RemoteLogSink("http://localhost", session=FakeSession(error=error))

    with pytest.raises(RemoteError) as info:
        sink.write(_record())
    assert info.value.__cause__ is error
    assert info.value.status_code is None


def test_unencodable_context_is_encoding_error() -> None:
    session = FakeSession()
    sink = RemoteLogSink("http://localhost", session=session)

    with pytest.raises(EncodingError):
        sink.write(LogRecord.create(LogLevel.INFO, "x", {"obj": object()}))
    assert session.calls == []


def test_close_leaves_injected_session_open() -> None:
    session = FakeSession()
    RemoteLogSink("http://localhost", session=session).close()

    assert not session.closed


def test_close_closes_owned_session(monkeypatch) -> None:
    monkeypatch.setattr(requests, "Session", FakeSession)
    sink = RemoteLogSink("http://localhost")
    assert isinstance(sink._session, FakeSession)

    sink.close()

    assert sink._session.closed


def test_lone_surrogate_is_encoding_error() -> None:
    session = FakeSession()
    sink = RemoteLogSink("http://localhost", session=session)

    with pytest.raises(EncodingError):
        sink.write(LogRecord.create(LogLevel.INFO, "bad \ud800 text"))
    assert session.calls == []
