"""
Interface for exporters that deliver finished spans to a backend.
"""

from abc import abstractmethod
from typing import Any, List, TYPE_CHECKING

from ..trace.interfaces import SpanEventListener

if TYPE_CHECKING:
    from ..models import SpanRecord


class Exporter(SpanEventListener):
    """Abstract interface for span exporters."""

    @abstractmethod
    def publish(self, spans: List["SpanRecord"]) -> Any:
        """
        Deliver a batch of finished spans.

        May be a coroutine function. Failures are reported by raising,
        usually PublishError; the caller logs them, and retrying is up to the
        exporter.

        Args:
            spans: Span records in the order they were buffered
        """
        pass
