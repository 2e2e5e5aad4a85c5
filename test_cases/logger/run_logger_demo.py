"""
Walks through the multi-sink logger: console fallback, a filtered
error file, a rotating audit file behind a buffer, and dynamic
sink registration.

Run from the repository root:
    python -m test_cases.logger.run_logger_demo
"""

import tempfile
from pathlib import Path

from src.sdk.logger.buffered_log_sink import BufferedLogSink
from src.sdk.logger.file_log_sink import FileLogSink
from src.sdk.logger.filter_log_sink import FilterLogSink
from src.sdk.logger.log_context import LogContext
from src.sdk.logger.log_level import LogLevel
from src.sdk.logger.log_manager import Logger
from src.sdk.logger.rotating_file_log_sink import RotatingFileLogSink


def main() -> None:
    log_dir = Path(tempfile.mkdtemp(prefix="logger_demo_"))
    print(f"Writing demo logs to {log_dir}\n")

    logger = Logger()  # console sink first: the fallback channel

    errors_only = FilterLogSink(FileLogSink(log_dir / "errors.log"), LogLevel.ERROR)
    logger.add_sink(errors_only)

    audit = BufferedLogSink(RotatingFileLogSink(log_dir / "audit.log", 512, 3), 5, 1.0)
    audit_handle = logger.add_sink(audit)

    ctx = LogContext.empty().attach_all({"service": "billing", "region": "eu-west-1"})
    request_ctx = ctx.attach("request_id", "req-001")

    logger.info(request_ctx, "Handling request for %s", "/invoices")
    logger.warn(request_ctx, "Slow upstream: %dms", 1250)
    logger.error(request_ctx, "Upstream failed with status %d", 502)

    for i in range(20):
        logger.info(ctx.attach("batch", i), "Processed item %d", i)

    logger.remove_sink(audit_handle)
    audit.close()
    logger.info(ctx, "Audit sink detached, %d sinks remain", len(logger.list_sinks()))

    logger.close()

    print("\nFiles written:")
    for path in sorted(log_dir.iterdir()):
        print(f"  {path.name:<14} {path.stat().st_size:>6} bytes")


if __name__ == "__main__":
    main()
