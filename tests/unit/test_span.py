"""
Unit tests for the span state machine.
"""

import logging
import time
from datetime import datetime, timezone

import pytest

from tracecore.models import Annotation, CanonicalCode, Link, MessageEvent, SpanKind
from tracecore.trace.interfaces import SpanEventListener
from tracecore.trace.span import BaseSpan, ChildSpan


class TestSpanLifecycle:
    """Test cases for start/end/truncate transitions."""

    def test_unstarted_span(self):
        """Test that a new span is neither started nor ended."""
        span = BaseSpan(name="op")

        assert not span.started
        assert not span.ended
        assert len(span.span_id) == 16

    def test_start_sets_start_time_once(self, listener, caplog):
        """Test that a second start() keeps the original start time."""
        caplog.set_level(logging.WARNING, logger="tracecore")
        span = BaseSpan(name="op")
        span.register_span_event_listener(listener)

        before = datetime.now(timezone.utc)
        span.start()
        after = datetime.now(timezone.utc)
        first_start = span.record.start_time
        time.sleep(0.01)
        span.start()

        assert span.started
        assert before <= first_start <= after
        assert span.record.start_time == first_start
        assert len(listener.started) == 1
        assert "already been started" in caplog.text

    def test_end_before_start_is_ignored(self, listener, caplog):
        """Test that ending an unstarted span neither ends nor starts it."""
        caplog.set_level(logging.WARNING, logger="tracecore")
        span = BaseSpan(name="op")
        span.register_span_event_listener(listener)

        span.end()

        assert span.record.end_time is None
        assert span.record.start_time is None
        assert listener.events == []
        assert "hasn't been started yet" in caplog.text

    def test_end_sets_end_time_once(self, listener, caplog):
        """Test that end() records the end time and a second end() is a no-op."""
        caplog.set_level(logging.WARNING, logger="tracecore")
        span = BaseSpan(name="op")
        span.register_span_event_listener(listener)
        span.start()

        span.end()
        first_end = span.record.end_time
        time.sleep(0.01)
        span.end()

        assert span.ended
        assert span.record.end_time == first_end
        assert first_end >= span.record.start_time
        assert len(listener.ended) == 1
        assert "already been ended" in caplog.text

    def test_listeners_released_after_end(self, listener):
        """Test that no listener stays registered once the span has ended."""
        span = BaseSpan(name="op")
        span.register_span_event_listener(listener)
        span.start()
        span.end()

        assert span.listeners == ()

    def test_listeners_receive_shared_record(self, listener):
        """Test that listeners get the span's own record on start and end."""
        span = BaseSpan(name="op")
        span.register_span_event_listener(listener)
        span.start()
        span.end()

        assert listener.events == [("start", span.record), ("end", span.record)]
        assert listener.started[0] is span.record

    def test_listener_order(self):
        """Test that listeners are notified in registration order."""
        calls = []

        class OrderedListener(SpanEventListener):
            def __init__(self, index):
                self.index = index

            def on_start_span(self, record):
                calls.append(f"start{self.index}")

            def on_end_span(self, record):
                calls.append(f"end{self.index}")

        span = BaseSpan(name="op")
        for index in range(3):
            span.register_span_event_listener(OrderedListener(index))
        span.start()
        span.end()

        assert calls == ["start0", "start1", "start2", "end0", "end1", "end2"]

    def test_truncate_ends_span(self, listener):
        """Test that truncate() marks the span and ends it."""
        span = BaseSpan(name="op")
        span.register_span_event_listener(listener)
        span.start()

        span.truncate()

        assert span.truncated
        assert span.ended
        assert len(listener.ended) == 1

    def test_truncate_unstarted_span(self, listener):
        """Test that truncate() follows the end() rules for unstarted spans."""
        span = BaseSpan(name="op")
        span.register_span_event_listener(listener)

        span.truncate()

        assert span.truncated
        assert not span.ended
        assert listener.events == []


class TestSpanListeners:
    """Test cases for listener registration and fan-out."""

    def test_unregister_removes_by_identity(self):
        """Test that every registration of the same object is removed, and only those."""

        class AlwaysEqualListener(SpanEventListener):
            def __init__(self):
                self.events = []

            def __eq__(self, other):
                return True

            __hash__ = object.__hash__

            def on_start_span(self, record):
                self.events.append(record)

            def on_end_span(self, record):
                pass

        removed = AlwaysEqualListener()
        kept = AlwaysEqualListener()
        span = BaseSpan(name="op")
        span.register_span_event_listener(removed)
        span.register_span_event_listener(kept)
        span.register_span_event_listener(removed)

        span.unregister_span_event_listener(removed)
        span.start()

        assert span.listeners == (kept,)
        assert removed.events == []
        assert kept.events == [span.record]

    def test_failing_listener_does_not_break_fan_out(self, listener, caplog):
        """Test that an exception in one listener is logged and others still run."""

        class BrokenListener(SpanEventListener):
            def on_start_span(self, record):
                raise RuntimeError("listener bug")

            def on_end_span(self, record):
                raise RuntimeError("listener bug")

        caplog.set_level(logging.ERROR, logger="tracecore")
        span = BaseSpan(name="op")
        span.register_span_event_listener(BrokenListener())
        span.register_span_event_listener(listener)

        span.start()
        span.end()

        assert len(listener.events) == 2
        assert "listener bug" in caplog.text


class TestSpanRecording:
    """Test cases for attributes, events, links and status."""

    def test_attributes_last_write_wins(self):
        """Test that attributes keep one value per key."""
        span = BaseSpan(name="op")

        span.add_attribute("http.status", 200)
        span.add_attribute("cached", False)
        span.add_attribute("http.status", 404)

        assert span.record.attributes == {"http.status": 404, "cached": False}

    def test_time_events_keep_order(self):
        """Test that annotations and message events are appended in order."""
        span = BaseSpan(name="op")
        timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)

        span.add_annotation("a", timestamp, {"k": "v"})
        span.add_message_event("SENT", "1")
        span.add_annotation("b")

        events = span.record.time_events
        assert events[0] == Annotation(description="a", timestamp=timestamp, attributes={"k": "v"})
        assert events[1] == MessageEvent(type="SENT", id="1")
        assert isinstance(events[2], Annotation)
        assert events[2].timestamp.tzinfo is not None

    def test_add_link(self):
        """Test that links are recorded with their attributes."""
        span = BaseSpan(name="op")

        span.add_link("a", "b", "PARENT_LINKED_SPAN", {"reason": "retry"})

        assert span.record.links == [
            Link(trace_id="a", span_id="b", type="PARENT_LINKED_SPAN", attributes={"reason": "retry"})
        ]

    def test_set_status(self):
        """Test that set_status stores the code and message."""
        span = BaseSpan(name="op")

        span.set_status(CanonicalCode.NOT_FOUND, "missing")

        assert span.record.status.code == 5
        assert span.record.status.message == "missing"

    def test_recording_after_end_is_kept(self):
        """Test that mutations after end() are still recorded."""
        span = BaseSpan(name="op")
        span.start()
        span.end()

        span.add_attribute("late", True)

        assert span.record.attributes == {"late": True}

    def test_span_context(self):
        """Test that the span context exposes the IDs as sampled."""
        span = BaseSpan(trace_id="my-trace-id", span_id="my-span-id")

        context = span.span_context

        assert context.trace_id == "my-trace-id"
        assert context.span_id == "my-span-id"
        assert context.options == 1

    def test_str_includes_identity(self):
        """Test the log representation of a span."""
        span = BaseSpan(name="op", trace_id="t", span_id="s", parent_span_id="p", kind=SpanKind.SERVER)

        assert str(span) == 'BaseSpan {"name": "op", "trace_id": "t", "span_id": "s", "kind": 1, "parent_span_id": "p"}'


class TestSpanContextManager:
    """Test cases for using spans in a with block."""

    def test_with_block_ends_span(self):
        """Test that leaving the block ends a started span."""
        span = BaseSpan(name="op")
        span.start()

        with span as entered:
            assert entered is span

        assert span.ended
        assert span.record.status is None

    def test_with_block_records_error(self):
        """Test that an exception sets an error status and propagates."""
        span = BaseSpan(name="op")
        span.start()

        with pytest.raises(ValueError):
            with span:
                raise ValueError("boom")

        assert span.ended
        assert span.record.status.code == CanonicalCode.UNKNOWN
        assert span.record.status.message == "boom"


class TestChildSpan:
    """Test cases for ChildSpan."""

    def test_child_is_same_process(self, listener):
        """Test that child spans are distinguishable from root spans."""
        span = ChildSpan(name="child")
        span.register_span_event_listener(listener)
        span.start()

        assert listener.started[0].same_process_as_parent_span is True

    def test_span_ids_are_unique(self):
        """Test that each span gets its own ID."""
        ids = {BaseSpan().span_id for _ in range(100)}

        assert len(ids) == 100
