"""
Shared fixtures and test doubles.
"""

import time

import pytest

from tracecore.config import TracerConfig
from tracecore.errors import PublishError
from tracecore.exporters.interfaces import Exporter
from tracecore.trace.interfaces import SpanEventListener
from tracecore.trace.tracer import CoreTracer


class RecordingListener(SpanEventListener):
    """Listener that remembers every event it receives."""

    def __init__(self, label: str = ""):
        self.label = label
        self.events = []

    def on_start_span(self, record):
        self.events.append(("start", record))

    def on_end_span(self, record):
        self.events.append(("end", record))

    @property
    def started(self):
        return [record for kind, record in self.events if kind == "start"]

    @property
    def ended(self):
        return [record for kind, record in self.events if kind == "end"]


class RecordingExporter(Exporter):
    """Exporter that keeps published batches, or fails on demand."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.published = []

    def on_start_span(self, record):
        pass

    def on_end_span(self, record):
        pass

    async def publish(self, spans):
        if self.fail:
            raise PublishError("backend unavailable", len(spans))
        self.published.append(list(spans))


def wait_for(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll predicate until it is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def exporter():
    return RecordingExporter()


@pytest.fixture
def tracer():
    """A tracer that samples every trace."""
    tracer = CoreTracer().start(TracerConfig(sampling_rate=1.0))
    yield tracer
    tracer.stop()


@pytest.fixture
def make_listener():
    """Factory for additional recording listeners."""
    return RecordingListener


@pytest.fixture
def failing_exporter():
    return RecordingExporter(fail=True)


@pytest.fixture
def wait_until():
    return wait_for
