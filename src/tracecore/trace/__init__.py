# Trace module
from .interfaces import SpanEventListener
from .span import BaseSpan, ChildSpan
from .root_span import RootSpan
from .sampler import Sampler
from .tracer import CoreTracer

__all__ = [
    "SpanEventListener",
    "BaseSpan",
    "ChildSpan",
    "RootSpan",
    "Sampler",
    "CoreTracer",
]
