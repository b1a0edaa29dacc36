"""
Buffer that batches finished spans for an exporter.
"""

from typing import Deque, List, Optional
from collections import deque
from queue import Queue
import asyncio
import functools
import inspect
import logging
import threading

from ..config import BufferConfig
from ..errors import ConfigError
from ..models import SpanRecord
from .interfaces import Exporter


class ExporterBuffer:
    """
    Collects ended spans and hands them to an exporter in batches.

    A batch is published as soon as the queue holds buffer_size records, or
    buffer_timeout milliseconds after the first record of a partial batch
    arrived, whichever comes first. Publishing never raises into the caller;
    failed batches are logged and kept in failed_batches for inspection.
    They are not retried here.

    add_to_buffer() never waits for the exporter. Batches are handed to a
    daemon worker thread that runs its own event loop and publishes them one
    at a time, in the order they were taken. The flush timer is a daemon
    threading.Timer, so it fires whether or not the caller's event loop is
    still running.
    """

    def __init__(self, exporter: Exporter, config: Optional[BufferConfig] = None):
        """
        Initialize the buffer.

        Args:
            exporter: Exporter whose publish() receives the batches
            config: Buffer size, timeout and logger
        """
        config = config or BufferConfig()
        self.exporter = exporter
        self.logger = config.logger or logging.getLogger(__name__)
        self._buffer_size = config.buffer_size
        self._buffer_timeout = config.buffer_timeout
        self._queue: List[SpanRecord] = []
        self._timer: Optional[threading.Timer] = None
        self._timer_generation = 0
        self._lock = threading.RLock()
        self._batches: "Queue[Optional[List[SpanRecord]]]" = Queue()
        self._worker: Optional[threading.Thread] = None
        self._in_flight = 0
        self._idle = threading.Condition()
        self.failed_batches: Deque[List[SpanRecord]] = deque(maxlen=config.max_failed_batches)

    # === Configuration ===

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @property
    def buffer_timeout(self) -> int:
        """Flush timeout in milliseconds."""
        return self._buffer_timeout

    def set_buffer_size(self, buffer_size: int) -> "ExporterBuffer":
        if buffer_size <= 0:
            raise ConfigError(f"buffer_size must be positive, got {buffer_size}")
        self._buffer_size = buffer_size
        return self

    # === State ===

    @property
    def queue(self) -> List[SpanRecord]:
        """Copy of the records waiting to be published."""
        with self._lock:
            return list(self._queue)

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    # === Buffering ===

    def add_to_buffer(self, record: SpanRecord) -> "ExporterBuffer":
        """
        Queue a finished span.

        Hands the whole queue to the publish worker once it reaches
        buffer_size; otherwise arms the flush timer if none is pending.

        Args:
            record: The ended span record

        Returns:
            The buffer itself
        """
        with self._lock:
            self._queue.append(record)
            if len(self._queue) < self._buffer_size:
                if self._timer is None:
                    self._arm_timer()
                return self
            batch = self._take_batch()
        self.logger.debug(f"Buffer full, flushing {len(batch)} spans")
        self._dispatch(batch)
        return self

    def flush(self) -> None:
        """Hand everything currently queued to the publish worker."""
        with self._lock:
            if not self._queue:
                return
            batch = self._take_batch()
        self._dispatch(batch)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every dispatched batch has been published or has failed.

        From async code, run it in a thread: await asyncio.to_thread(buffer.join).

        Args:
            timeout: Seconds to wait; None waits indefinitely

        Returns:
            True if the worker is idle, False if the timeout expired first
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._in_flight == 0, timeout)

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Flush queued spans, wait for pending publishes and stop the worker.

        Adding spans afterwards starts a new worker.

        Returns:
            True if every batch was published before the timeout
        """
        self.flush()
        drained = self.join(timeout)
        with self._lock:
            self._cancel_timer()
            worker, self._worker = self._worker, None
        if worker is not None:
            self._batches.put(None)
            worker.join(timeout)
        return drained

    def _take_batch(self) -> List[SpanRecord]:
        batch = self._queue
        self._queue = []
        self._cancel_timer()
        return batch

    # === Timer ===

    def _arm_timer(self) -> None:
        self._timer_generation += 1
        timer = threading.Timer(
            self._buffer_timeout / 1000,
            functools.partial(self._on_timeout, self._timer_generation),
        )
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timeout(self, generation: int) -> None:
        with self._lock:
            # A size flush may have replaced this timer before it fired.
            if generation != self._timer_generation or self._timer is None:
                return
            self._timer = None
            if not self._queue:
                return
            batch = self._take_batch()
        self.logger.debug(f"Buffer timeout, flushing {len(batch)} spans")
        self._dispatch(batch)

    # === Publishing ===

    def _dispatch(self, batch: List[SpanRecord]) -> None:
        with self._idle:
            self._in_flight += 1
        with self._lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(
                    target=self._run_worker, name="tracecore-exporter", daemon=True
                )
                self._worker.start()
            self._batches.put(batch)

    def _run_worker(self) -> None:
        loop = asyncio.new_event_loop()
        try:
            while True:
                batch = self._batches.get()
                if batch is None:
                    break
                try:
                    loop.run_until_complete(self._publish(batch))
                finally:
                    with self._idle:
                        self._in_flight -= 1
                        self._idle.notify_all()
        finally:
            loop.close()

    async def _publish(self, batch: List[SpanRecord]) -> None:
        try:
            result = self.exporter.publish(batch)
            if inspect.isawaitable(result):
                await result
        except (Exception, asyncio.CancelledError) as e:
            self.logger.error(f"Failed to publish {len(batch)} spans: {e!r}")
            self.failed_batches.append(batch)
