from __future__ import annotations

import sys
import threading
import time
from typing import Optional

from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.log_sink import LogSink, close_sink, sink_name
from src.sdk.logger.sink_errors import SinkWriteError


class BufferedLogSink:
    """
    Decorator sink that batches records for another sink.

    A batch is flushed when it reaches `capacity` records, or when
    `flush_delay` seconds pass without a new write (every write
    postpones the idle flush).

    Locking:
      - `_lock` guards the queue and is the lock every flush takes,
        whether called by write() or by the idle-flush worker.
      - `_timer_cond` guards the idle deadline and wakes the single
        worker thread, started on the first write. The queue lock is
        never held while the deadline is armed or reset, so the worker
        firing during write() can never block on that write.
    """

    def __init__(self, sink: LogSink, capacity: int, flush_delay: float):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if flush_delay <= 0:
            raise ValueError("flush_delay must be a positive number of seconds")

        self._sink = sink
        self._capacity = capacity
        self._flush_delay = flush_delay

        self._lock = threading.Lock()
        self._queue: list[LogRecord] = []

        self._timer_cond = threading.Condition()
        self._deadline: Optional[float] = None
        self._stopped = False
        self._worker: Optional[threading.Thread] = None

    @property
    def sink(self) -> LogSink:
        return self._sink

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._queue)

    # -------------------------------------------------
    # Sink API
    # -------------------------------------------------
    def write(self, record: LogRecord) -> None:
        with self._lock:
            self._queue.append(record)
            full = len(self._queue) >= self._capacity

        self._arm_timer()

        if full:
            self.flush()

    def flush(self) -> None:
        """
        Drain the queue into the wrapped sink, in enqueue order.

        The first failure stops the drain; records already written
        stay written, the rest of the batch is discarded and reported
        through the raised SinkWriteError.
        """
        try:
            with self._lock:
                batch = self._queue
                self._queue = []
                for index, record in enumerate(batch):
                    try:
                        self._sink.write(record)
                    except Exception as e:
                        dropped = len(batch) - index
                        raise SinkWriteError(
                            "BufferedLogSink",
                            f"failed to write buffered record to {sink_name(self._sink)}: {e}",
                            details={"written": index, "dropped": dropped},
                        ) from e
        finally:
            self._disarm_timer_if_idle()

    def close(self) -> None:
        self._stop_worker()
        try:
            self.flush()
        finally:
            close_sink(self._sink)

    # -------------------------------------------------
    # Idle-flush worker
    # -------------------------------------------------
    def _arm_timer(self) -> None:
        with self._timer_cond:
            if self._stopped:
                return
            self._deadline = time.monotonic() + self._flush_delay
            if self._worker is None:
                self._worker = threading.Thread(
                    target=self._run_idle_flush,
                    name="BufferedLogSink-idle-flush",
                    daemon=True,
                )
                self._worker.start()
            self._timer_cond.notify()

    def _disarm_timer_if_idle(self) -> None:
        # Checked under the timer lock so a concurrent write cannot
        # enqueue, arm the deadline, and then lose it to this reset.
        with self._timer_cond:
            with self._lock:
                if self._queue:
                    return
            self._deadline = None

    def _run_idle_flush(self) -> None:
        while True:
            with self._timer_cond:
                while not self._stopped:
                    if self._deadline is None:
                        self._timer_cond.wait()
                        continue
                    remaining = self._deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    self._timer_cond.wait(remaining)
                if self._stopped:
                    return
                self._deadline = None

            try:
                self.flush()
            except Exception as e:
                # Nobody to raise to on the worker thread.
                print(f"BufferedLogSink idle flush failed: {e}", file=sys.stderr)

    def _stop_worker(self) -> None:
        with self._timer_cond:
            self._stopped = True
            self._deadline = None
            worker = self._worker
            self._timer_cond.notify_all()
        if worker is not None and worker is not threading.current_thread():
            worker.join()
