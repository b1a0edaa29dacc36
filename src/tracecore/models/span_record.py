"""
Span record model and the value types it is built from.
"""

from enum import IntEnum
from typing import Dict, List, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field

AttributeValue = Union[bool, int, float, str]
Attributes = Dict[str, AttributeValue]

DEFAULT_ROOT_SPAN_NAME = "unnamed"


class SpanKind(IntEnum):
    """Relationship of a span to the remote side of the operation."""
    UNSPECIFIED = 0
    SERVER = 1
    CLIENT = 2


class CanonicalCode(IntEnum):
    """Canonical status codes (gRPC numbering)."""
    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


class Status(BaseModel):
    """Final status of a span."""
    code: int = Field(..., description="Canonical status code")
    message: str = Field("", description="Developer-facing status message")


class Annotation(BaseModel):
    """A timestamped text annotation on a span."""
    description: str = Field(..., description="User-supplied message describing the event")
    timestamp: datetime = Field(..., description="When the event happened")
    attributes: Attributes = Field(default_factory=dict, description="Attributes on the annotation")


class MessageEvent(BaseModel):
    """A message sent or received between spans."""
    type: str = Field(..., description="Whether the message was sent or received")
    id: str = Field(..., description="Identifier of the message")


class Link(BaseModel):
    """A pointer from this span to a span in the same or another trace."""
    trace_id: str = Field(..., description="Trace ID of the linked span")
    span_id: str = Field(..., description="Span ID of the linked span")
    type: str = Field(..., description="Relationship of this span to the linked one")
    attributes: Attributes = Field(default_factory=dict, description="Attributes on the link")


class SpanContext(BaseModel):
    """Identity of a span that can be carried across call boundaries."""
    trace_id: str = Field(..., description="Trace the span belongs to")
    span_id: str = Field("", description="The span itself")
    options: int = Field(1, description="Trace flags; 1 means sampled")


class SpanOptions(BaseModel):
    """Options accepted when starting a root span."""
    name: str = Field(DEFAULT_ROOT_SPAN_NAME, description="Root span name")
    span_context: Optional[SpanContext] = Field(
        None, description="Context of a remote parent, to continue an existing trace"
    )
    kind: Optional[SpanKind] = Field(None, description="Span kind; the tracer default applies when omitted")


class SpanRecord(BaseModel):
    """
    The data recorded for one span.

    A record belongs to exactly one span object, which is the only thing that
    writes to it. Listeners receive it by reference on start and end and must
    treat it as read-only.
    """
    trace_id: str = Field("", description="Identifier shared by every span in the trace")
    span_id: str = Field("", description="Unique identifier of this span")
    parent_span_id: str = Field("", description="Span ID of the parent; empty for a new trace")
    name: str = Field("", description="Description of the span's operation")
    kind: SpanKind = Field(SpanKind.UNSPECIFIED, description="Span kind")
    start_time: Optional[datetime] = Field(None, description="Start time, None until started")
    end_time: Optional[datetime] = Field(None, description="End time, None until ended")
    attributes: Attributes = Field(default_factory=dict, description="Span attributes")
    time_events: List[Union[Annotation, MessageEvent]] = Field(
        default_factory=list,
        description="Annotations and message events, in the order they were added"
    )
    links: List[Link] = Field(default_factory=list, description="Links to other spans")
    status: Optional[Status] = Field(None, description="Optional final status")
    same_process_as_parent_span: bool = Field(
        False, description="True when the parent span lives in the same process"
    )

    @property
    def duration_ms(self) -> Optional[float]:
        """Duration in milliseconds, or None while the span is still open."""
        if self.start_time is None or self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds() * 1000
