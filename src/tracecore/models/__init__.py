"""
Data models for spans and the values recorded on them.
"""

from .span_record import (
    SpanRecord,
    SpanKind,
    CanonicalCode,
    Status,
    Annotation,
    MessageEvent,
    Link,
    SpanContext,
    SpanOptions,
    DEFAULT_ROOT_SPAN_NAME,
    Attributes,
    AttributeValue,
)

__all__ = [
    "SpanRecord",
    "SpanKind",
    "CanonicalCode",
    "Status",
    "Annotation",
    "MessageEvent",
    "Link",
    "SpanContext",
    "SpanOptions",
    "DEFAULT_ROOT_SPAN_NAME",
    "Attributes",
    "AttributeValue",
]
