"""
Exceptions raised by tracecore.

Tracing failures never reach instrumented code: span misuse is logged, and
publish failures are caught at the buffer boundary. ConfigError is the only
error surfaced to callers, and only from explicit configuration calls.
"""


class TracingError(Exception):
    """Base class for tracecore errors."""


class ConfigError(TracingError, ValueError):
    """An invalid configuration value."""


class PublishError(TracingError):
    """An exporter failed to deliver a batch of spans."""

    def __init__(self, message: str, batch_size: int = 0, status_code: int = None):
        super().__init__(message)
        self.batch_size = batch_size
        self.status_code = status_code


__all__ = [
    "TracingError",
    "ConfigError",
    "PublishError",
]
