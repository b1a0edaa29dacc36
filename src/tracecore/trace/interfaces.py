"""
Interfaces for objects that observe span lifecycle events.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import SpanRecord


class SpanEventListener(ABC):
    """Abstract interface for anything that reacts to spans starting and ending."""

    @abstractmethod
    def on_start_span(self, record: "SpanRecord") -> None:
        """
        Called when a span starts.

        Args:
            record: The record of the span that just started. Read-only.
        """
        pass

    @abstractmethod
    def on_end_span(self, record: "SpanRecord") -> None:
        """
        Called when a span ends.

        Args:
            record: The record of the span that just ended. Read-only.
        """
        pass
