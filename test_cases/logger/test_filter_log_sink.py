import io

from src.sdk.logger.filter_log_sink import FilterLogSink
from src.sdk.logger.log_level import LogLevel
from src.sdk.logger.log_manager import Logger
from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.writer_log_sink import WriterLogSink


class RecordingSink:
    def __init__(self):
        self.records: list[LogRecord] = []
        self.closed = False

    def write(self, record: LogRecord) -> None:
        self.records.append(record)

    def close(self) -> None:
        self.closed = True


def test_only_error_passes_through() -> None:
    buf = io.StringIO()
    logger = Logger.with_sinks(FilterLogSink(WriterLogSink(buf), LogLevel.ERROR))

    logger.info(None, "info message")
    logger.warn(None, "warn message")
    logger.error(None, "error message")

    lines = buf.getvalue().splitlines()
    assert len(lines) == 1
    assert LogRecord.decode(lines[0]).level == LogLevel.ERROR
    assert "error message" in lines[0]


def test_forwards_iff_level_allowed() -> None:
    for allowed in [(), (LogLevel.INFO,), (LogLevel.WARN, LogLevel.ERROR), tuple(LogLevel)]:
        inner = RecordingSink()
        sink = FilterLogSink(inner, *allowed)
        records = [LogRecord.create(level, level.value.lower()) for level in LogLevel]

        for r in records:
            sink.write(r)

        expected = [r for r in records if r.level in allowed]
        assert inner.records == expected
        assert all(a is b for a, b in zip(inner.records, expected))


def test_accepts_level_names() -> None:
    sink = FilterLogSink(RecordingSink(), "warn", "ERROR")

    assert sink.levels == frozenset({LogLevel.WARN, LogLevel.ERROR})


def test_close_delegates() -> None:
    inner = RecordingSink()
    FilterLogSink(inner, LogLevel.INFO).close()

    assert inner.closed
