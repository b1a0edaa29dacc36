"""
Exporters that drop spans or write them to a text stream.
"""

from typing import List, Optional, TextIO
import logging
import sys

from ..config import BufferConfig
from ..models import SpanRecord
from .buffer import ExporterBuffer
from .interfaces import Exporter


class NoopExporter(Exporter):
    """Discards all span data."""

    def on_start_span(self, record: SpanRecord) -> None:
        pass

    def on_end_span(self, record: SpanRecord) -> None:
        pass

    async def publish(self, spans: List[SpanRecord]) -> None:
        return None


class ConsoleExporter(Exporter):
    """
    Writes finished spans to a stream, one JSON document per line.
    """

    def __init__(self, config: Optional[BufferConfig] = None, stream: Optional[TextIO] = None):
        """
        Initialize the console exporter.

        Args:
            config: Buffer configuration
            stream: Output stream; sys.stdout by default
        """
        config = config or BufferConfig()
        self.logger = config.logger or logging.getLogger(__name__)
        self.stream = stream
        self.buffer = ExporterBuffer(self, config)

    def on_start_span(self, record: SpanRecord) -> None:
        pass

    def on_end_span(self, record: SpanRecord) -> None:
        self.buffer.add_to_buffer(record)

    async def publish(self, spans: List[SpanRecord]) -> None:
        stream = self.stream or sys.stdout
        for span in spans:
            stream.write(span.model_dump_json() + "\n")
        stream.flush()
        self.logger.debug(f"Wrote {len(spans)} spans to console")
