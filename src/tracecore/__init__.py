"""
tracecore - A distributed-tracing instrumentation core.

This package provides:
- Span records and a start/end span state machine
- Root spans that own, relay and force-close their child spans
- A tracer with per-context current trace, sampling and listener fan-out
- Consistent probability sampling over trace IDs
- An exporter buffer batching finished spans by size or time
"""

import logging

__version__ = "0.1.0"
__author__ = "Your Name"
__email__ = "your.email@example.com"

from .models import (
    SpanRecord,
    SpanKind,
    CanonicalCode,
    Status,
    Annotation,
    MessageEvent,
    Link,
    SpanContext,
    SpanOptions,
)
from .config import BufferConfig, TracerConfig, TracingConfig
from .errors import TracingError, ConfigError, PublishError
from .trace import SpanEventListener, BaseSpan, ChildSpan, RootSpan, Sampler, CoreTracer
from .exporters import Exporter, ExporterBuffer, NoopExporter, ConsoleExporter, HttpJsonExporter
from .tracing import Tracing, get_tracing

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Models
    "SpanRecord",
    "SpanKind",
    "CanonicalCode",
    "Status",
    "Annotation",
    "MessageEvent",
    "Link",
    "SpanContext",
    "SpanOptions",
    # Configuration
    "BufferConfig",
    "TracerConfig",
    "TracingConfig",
    # Errors
    "TracingError",
    "ConfigError",
    "PublishError",
    # Tracing
    "SpanEventListener",
    "BaseSpan",
    "ChildSpan",
    "RootSpan",
    "Sampler",
    "CoreTracer",
    "Tracing",
    "get_tracing",
    # Exporters
    "Exporter",
    "ExporterBuffer",
    "NoopExporter",
    "ConsoleExporter",
    "HttpJsonExporter",
]
