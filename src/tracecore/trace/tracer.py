"""
Tracer: current-trace context, sampling gate and listener hub.
"""

from typing import Any, Callable, List, Optional, TypeVar, Union
from contextvars import ContextVar
import functools
import inspect
import logging

from ..config import TracerConfig
from ..models import SpanKind, SpanOptions, SpanRecord
from ..utils import random_trace_id
from .interfaces import SpanEventListener
from .root_span import RootSpan
from .sampler import Sampler
from .span import ChildSpan, notify_listeners

T = TypeVar("T")

# Registration methods of pyee/Node-style event emitters.
EMITTER_REGISTRATION_METHODS = ("on", "add_listener", "once", "prepend_listener")


class CoreTracer(SpanEventListener):
    """
    Starts root spans and fans span events out to global listeners.

    Each tracer keeps its own current root span in a ContextVar, so the
    current trace follows threads and asyncio tasks. Callbacks that run
    later, outside the original call, are bound to the trace with wrap().

    Example:
        ```python
        tracer = CoreTracer().start(TracerConfig(sampling_rate=1.0))

        def handle(root):
            child = tracer.start_child_span("db.query")
            ...
            child.end()
            root.end()

        tracer.start_root_span({"name": "request"}, handle)
        ```
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.sampler = Sampler()
        self.default_kind = SpanKind.SERVER
        self._active = False
        self._event_listeners: List[SpanEventListener] = []
        self._current_root_span: ContextVar[Optional[RootSpan]] = ContextVar(
            f"current_root_span_{id(self)}", default=None
        )

    # === Lifecycle ===

    @property
    def active(self) -> bool:
        return self._active

    def start(self, config: Optional[TracerConfig] = None) -> "CoreTracer":
        """
        Activate the tracer.

        Args:
            config: Sampling rate, default span kind and logger

        Returns:
            The tracer itself
        """
        config = config or TracerConfig()
        if config.logger is not None:
            self.logger = config.logger
        self.sampler = Sampler().probability(config.sampling_rate)
        self.default_kind = config.default_kind
        self._active = True
        self.logger.debug(f"Tracer started with sampler {self.sampler.description}")
        return self

    def stop(self) -> "CoreTracer":
        self._active = False
        return self

    # === Context ===

    @property
    def current_root_span(self) -> Optional[RootSpan]:
        return self._current_root_span.get()

    @current_root_span.setter
    def current_root_span(self, root: Optional[RootSpan]) -> None:
        self._current_root_span.set(root)

    def clear_current_trace(self) -> None:
        """Detach the current root span from the context without ending it."""
        self._current_root_span.set(None)

    # === Spans ===

    def start_root_span(
        self,
        options: Union[SpanOptions, dict],
        fn: Callable[[Optional[RootSpan]], T],
    ) -> T:
        """
        Start a root span and run fn with it as the current root.

        If the tracer is inactive or the sampler rejects the trace, fn is
        called with None and no span is created.

        Args:
            options: Span name, optional remote span context and kind
            fn: Continuation receiving the root span (or None)

        Returns:
            Whatever fn returns
        """
        if not self._active:
            return fn(None)

        if isinstance(options, dict):
            options = SpanOptions.model_validate(options)

        span_context = options.span_context
        trace_id = span_context.trace_id if span_context and span_context.trace_id else random_trace_id()
        if not self.sampler.should_sample(trace_id):
            self.logger.debug(f"Trace {trace_id} not sampled by {self.sampler.description} sampler")
            return fn(None)

        if options.kind is None:
            options = options.model_copy(update={"kind": self.default_kind})
        root = RootSpan(options, logger=self.logger, trace_id=trace_id)
        root.register_span_event_listener(self)

        token = self._current_root_span.set(root)
        try:
            root.start()
            return fn(root)
        finally:
            self._current_root_span.reset(token)

    def start_child_span(self, name: str, kind: SpanKind = SpanKind.UNSPECIFIED) -> Optional[ChildSpan]:
        """
        Start a child span of the current root span.

        Returns:
            The child span, or None when there is no current root span
        """
        root = self.current_root_span
        if root is None:
            self.logger.warning(f"No current root span; can't start child span '{name}'")
            return None
        return root.start_child_span(name, kind)

    # === Listeners ===

    @property
    def event_listeners(self) -> tuple:
        return tuple(self._event_listeners)

    def register_span_event_listener(self, listener: SpanEventListener) -> None:
        self._event_listeners.append(listener)

    def unregister_span_event_listener(self, listener: SpanEventListener) -> None:
        self._event_listeners = [l for l in self._event_listeners if l is not listener]

    def on_start_span(self, record: SpanRecord) -> None:
        if self._active:
            notify_listeners(list(self._event_listeners), lambda l: l.on_start_span(record), self.logger)

    def on_end_span(self, record: SpanRecord) -> None:
        if self._active:
            notify_listeners(list(self._event_listeners), lambda l: l.on_end_span(record), self.logger)

    # === Context propagation ===

    def wrap(self, fn: Callable[..., T]) -> Callable[..., T]:
        """
        Bind the current trace context to fn.

        When the returned function runs, the root span that was current at
        wrap time is made current for the call and the previous context is
        restored afterwards, even if fn raises. Coroutine functions keep the
        context for the whole await.

        Args:
            fn: Function or coroutine function to bind

        Returns:
            The bound function
        """
        root = self.current_root_span

        if inspect.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def wrapped_coroutine(*args: Any, **kwargs: Any):
                token = self._current_root_span.set(root)
                try:
                    return await fn(*args, **kwargs)
                finally:
                    self._current_root_span.reset(token)
            return wrapped_coroutine

        @functools.wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            token = self._current_root_span.set(root)
            try:
                return fn(*args, **kwargs)
            finally:
                self._current_root_span.reset(token)
        return wrapped

    def wrap_emitter(self, emitter: Any) -> None:
        """
        Bind the current trace context to handlers registered on an emitter.

        Works with emitters exposing pyee/Node-style registration methods
        (on, add_listener, once, prepend_listener). Each handler registered
        after this call, directly or through decorator usage, is passed
        through wrap() with the context current at wrap_emitter() time.

        Args:
            emitter: The event emitter to patch
        """
        root = self.current_root_span
        patched = 0
        for method_name in EMITTER_REGISTRATION_METHODS:
            register = getattr(emitter, method_name, None)
            if not callable(register):
                continue
            setattr(emitter, method_name, self._bind_registration(register, root))
            patched += 1
        if not patched:
            self.logger.warning(f"Object {emitter!r} has no event registration methods to wrap")

    def _bind_registration(self, register: Callable, root: Optional[RootSpan]) -> Callable:
        tracer = self

        def bind(handler: Callable) -> Callable:
            token = tracer._current_root_span.set(root)
            try:
                return tracer.wrap(handler)
            finally:
                tracer._current_root_span.reset(token)

        @functools.wraps(register)
        def wrapped_register(event, handler=None, *args, **kwargs):
            if handler is None:
                # Decorator form: emitter.on("event") returns a decorator.
                decorator = register(event, *args, **kwargs)
                return lambda f: decorator(bind(f))
            return register(event, bind(handler), *args, **kwargs)

        return wrapped_register
