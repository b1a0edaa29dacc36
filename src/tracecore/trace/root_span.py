"""
Root span: the top of a trace, owner of its child spans.
"""

from typing import List, Optional, Union
import logging

from ..models import DEFAULT_ROOT_SPAN_NAME, SpanKind, SpanOptions, SpanRecord
from ..utils import random_trace_id
from .interfaces import SpanEventListener
from .span import BaseSpan, ChildSpan, notify_listeners


class RootSpan(BaseSpan, SpanEventListener):
    """
    The first span of a trace.

    Child spans are started through start_child_span() and register the root
    as their listener, so the root's own listeners observe every span of the
    trace. Ending the root truncates any child that is still open.
    """

    def __init__(
        self,
        options: Optional[Union[SpanOptions, dict]] = None,
        logger: Optional[logging.Logger] = None,
        trace_id: Optional[str] = None,
    ):
        """
        Initialize the root span.

        Args:
            options: Name, optional remote span context and kind
            logger: Logger for lifecycle warnings
            trace_id: Trace ID already resolved by the caller; takes precedence
                over the one in options.span_context
        """
        if isinstance(options, dict):
            options = SpanOptions.model_validate(options)

        span_context = options.span_context if options else None
        if trace_id is None:
            trace_id = span_context.trace_id if span_context and span_context.trace_id else random_trace_id()

        super().__init__(
            logger or logging.getLogger(__name__),
            trace_id=trace_id,
            parent_span_id=span_context.span_id if span_context else "",
            name=options.name if options and options.name else DEFAULT_ROOT_SPAN_NAME,
            kind=options.kind if options and options.kind is not None else SpanKind.UNSPECIFIED,
            same_process_as_parent_span=False,
        )
        self._spans: List[ChildSpan] = []

    @property
    def spans(self) -> List[ChildSpan]:
        """Child spans in creation order."""
        return list(self._spans)

    def end(self) -> None:
        # Children must end before the root does.
        with self._lock:
            for child in self._spans:
                if child.started and not child.ended:
                    child.truncate()
            super().end()

    def on_start_span(self, record: SpanRecord) -> None:
        notify_listeners(list(self._listeners), lambda l: l.on_start_span(record), self.logger)

    def on_end_span(self, record: SpanRecord) -> None:
        notify_listeners(list(self._listeners), lambda l: l.on_end_span(record), self.logger)

    def start_child_span(self, name: str, kind: SpanKind = SpanKind.CLIENT) -> Optional[ChildSpan]:
        """
        Start a new child span of this root.

        Args:
            name: Child span name
            kind: Child span kind

        Returns:
            The started child span, or None if the root is not started or
            already ended
        """
        with self._lock:
            if self.ended:
                self.logger.warning(f"Can't start child span on ended root span: {self}")
                return None
            if not self.started:
                self.logger.warning(f"Can't start child span on un-started root span: {self}")
                return None
            child = ChildSpan(
                self.logger,
                trace_id=self.record.trace_id,
                parent_span_id=self.record.span_id,
                name=name,
                kind=kind,
            )
            child.register_span_event_listener(self)
            child.start()
            self._spans.append(child)
        return child
