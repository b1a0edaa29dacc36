"""
Span state machine shared by root and child spans.
"""

from typing import Callable, List, Optional
from datetime import datetime
import json
import logging
import threading

from ..models import (
    Annotation,
    Attributes,
    AttributeValue,
    CanonicalCode,
    Link,
    MessageEvent,
    SpanContext,
    SpanRecord,
    Status,
)
from ..utils import random_span_id, utc_now
from .interfaces import SpanEventListener


def notify_listeners(
    listeners: List[SpanEventListener],
    notify: Callable[[SpanEventListener], None],
    log: logging.Logger,
) -> None:
    """
    Call notify on each listener in order.

    An exception raised by a listener is logged and does not stop the
    remaining listeners or reach the caller.
    """
    for listener in listeners:
        try:
            notify(listener)
        except Exception:
            log.exception(f"Span event listener {listener!r} raised")


class BaseSpan:
    """
    A span moving through unstarted -> started -> ended.

    Misuse (starting twice, ending twice, ending before starting) is logged
    as a warning and otherwise ignored.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, **record_fields):
        """
        Initialize the span.

        Args:
            logger: Logger for lifecycle warnings; the module logger by default
            **record_fields: Initial SpanRecord fields such as trace_id, name, kind
        """
        self.logger = logger or logging.getLogger(__name__)
        record_fields.setdefault("span_id", random_span_id())
        self.record = SpanRecord(**record_fields)
        self.truncated = False
        self._listeners: List[SpanEventListener] = []
        self._lock = threading.RLock()

    # === Listeners ===

    def register_span_event_listener(self, listener: SpanEventListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unregister_span_event_listener(self, listener: SpanEventListener) -> None:
        with self._lock:
            self._listeners = [l for l in self._listeners if l is not listener]

    @property
    def listeners(self) -> tuple:
        return tuple(self._listeners)

    # === State ===

    @property
    def started(self) -> bool:
        return self.record.start_time is not None

    @property
    def ended(self) -> bool:
        return self.record.end_time is not None

    @property
    def trace_id(self) -> str:
        return self.record.trace_id

    @property
    def span_id(self) -> str:
        return self.record.span_id

    @property
    def parent_span_id(self) -> str:
        return self.record.parent_span_id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def span_context(self) -> SpanContext:
        """Trace context of this span. Recorded spans are always sampled."""
        return SpanContext(trace_id=self.record.trace_id, span_id=self.record.span_id, options=1)

    # === Recording ===

    def add_attribute(self, key: str, value: AttributeValue) -> None:
        self.record.attributes[key] = value

    def add_annotation(
        self,
        description: str,
        timestamp: Optional[datetime] = None,
        attributes: Optional[Attributes] = None,
    ) -> None:
        self.record.time_events.append(
            Annotation(
                description=description,
                timestamp=timestamp or utc_now(),
                attributes=attributes or {},
            )
        )

    def add_link(
        self,
        trace_id: str,
        span_id: str,
        type: str,
        attributes: Optional[Attributes] = None,
    ) -> None:
        self.record.links.append(
            Link(trace_id=trace_id, span_id=span_id, type=type, attributes=attributes or {})
        )

    def add_message_event(self, type: str, id: str) -> None:
        self.record.time_events.append(MessageEvent(type=type, id=id))

    def set_status(self, code: int, message: str = "") -> None:
        self.record.status = Status(code=code, message=message)

    # === Lifecycle ===

    def start(self) -> None:
        """Start the span and notify listeners. A second call is ignored."""
        with self._lock:
            if self.started:
                self.logger.warning(f"start() called on span that has already been started: {self}")
                return
            self.record.start_time = utc_now()
            listeners = list(self._listeners)
        notify_listeners(listeners, lambda l: l.on_start_span(self.record), self.logger)

    def end(self) -> None:
        """End the span, notify listeners, then drop them."""
        with self._lock:
            if self.ended:
                self.logger.warning(f"end() called on span that has already been ended: {self}")
                return
            if not self.started:
                self.logger.warning(f"end() called on span that hasn't been started yet: {self}")
                return
            self.record.end_time = utc_now()
            listeners = list(self._listeners)
            self._listeners = []
        notify_listeners(listeners, lambda l: l.on_end_span(self.record), self.logger)

    def truncate(self) -> None:
        """Force the span to end."""
        self.truncated = True
        self.end()
        self.logger.debug(f"Truncating {self}")

    # === Context Manager ===

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_val is not None:
            self.set_status(CanonicalCode.UNKNOWN, str(exc_val))
        self.end()

    def __str__(self) -> str:
        serialized = {
            "name": self.record.name,
            "trace_id": self.record.trace_id,
            "span_id": self.record.span_id,
            "kind": int(self.record.kind),
        }
        if self.record.parent_span_id:
            serialized["parent_span_id"] = self.record.parent_span_id
        return f"{self.__class__.__name__} {json.dumps(serialized)}"


class ChildSpan(BaseSpan):
    """A span whose parent is a root span in the same process."""

    def __init__(self, logger: Optional[logging.Logger] = None, **record_fields):
        super().__init__(logger, **record_fields)
        self.record.same_process_as_parent_span = True


__all__ = ["BaseSpan", "ChildSpan", "notify_listeners"]
