import io
import json

import pytest

from src.sdk.logger.console_log_sink import ConsoleLogSink
from src.sdk.logger.log_level import LogLevel
from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.sink_errors import SinkWriteError
from src.sdk.logger.writer_log_sink import WriterLogSink


class _BrokenStream(io.StringIO):
    def write(self, s: str) -> int:
        raise OSError("broken pipe")


def test_console_routes_levels_to_streams(capsys) -> None:
    sink = ConsoleLogSink()

    sink.write(LogRecord.create(LogLevel.INFO, "all good"))
    sink.write(LogRecord.create(LogLevel.WARN, "hmm"))
    sink.write(LogRecord.create(LogLevel.ERROR, "bad"))

    captured = capsys.readouterr()
    out_lines = captured.out.splitlines()
    err_lines = captured.err.splitlines()
    assert [json.loads(l)["message"] for l in out_lines] == ["all good", "hmm"]
    assert [json.loads(l)["level"] for l in err_lines] == ["ERROR"]


def test_console_degrades_unencodable_context() -> None:
    out = io.StringIO()
    sink = ConsoleLogSink(stdout=out, stderr=io.StringIO())

    sink.write(LogRecord.create(LogLevel.INFO, "with object", {"obj": object()}))

    data = json.loads(out.getvalue())
    assert data["message"] == "with object"
    assert "error" in data["context"]
    assert "obj" not in data["context"]


def test_console_broken_stream_raises() -> None:
    sink = ConsoleLogSink(stdout=_BrokenStream(), stderr=io.StringIO())

    with pytest.raises(SinkWriteError):
        sink.write(LogRecord.create(LogLevel.INFO, "lost"))


def test_writer_sink_appends_json_lines() -> None:
    buf = io.StringIO()
    sink = WriterLogSink(buf)

    sink.write(LogRecord.create(LogLevel.INFO, "one", {"k": "v"}))
    sink.write(LogRecord.create(LogLevel.ERROR, "two"))

    lines = buf.getvalue().splitlines()
    assert len(lines) == 2
    assert json.loads(lines[0])["context"] == {"k": "v"}
    assert json.loads(lines[1])["level"] == "ERROR"


def test_writer_sink_broken_stream_raises() -> None:
    sink = WriterLogSink(_BrokenStream())

    with pytest.raises(SinkWriteError):
        sink.write(LogRecord.create(LogLevel.INFO, "lost"))


def test_console_degrades_lone_surrogate() -> None:
    out = io.StringIO()
    sink = ConsoleLogSink(stdout=out, stderr=io.StringIO())

    sink.write(LogRecord.create(LogLevel.INFO, "bad \ud800 text", {"k": "v"}))

    line = out.getvalue()
    line.encode("utf-8")
    data = json.loads(line)
    assert data["message"] == "bad \\ud800 text"
    assert "error" in data["context"]


def test_writer_sink_degrades_lone_surrogate() -> None:
    buf = io.StringIO()
    sink = WriterLogSink(buf)

    sink.write(LogRecord.create(LogLevel.WARN, "ok", {"k": "\udfff"}))

    data = json.loads(buf.getvalue())
    assert data["level"] == "WARN"
    assert data["message"] == "ok"
    assert "k" not in data["context"]
    assert "error" in data["context"]
