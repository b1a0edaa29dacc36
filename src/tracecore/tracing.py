"""
Tracing facade tying together the tracer and an exporter.
"""

from typing import Optional
import logging

from .config import LOG_LEVELS, TracingConfig
from .exporters import Exporter, NoopExporter
from .trace import CoreTracer

PACKAGE_LOGGER_NAME = "tracecore"


class Tracing:
    """
    Entry point for enabling tracing in an application.

    Example:
        ```python
        tracing = get_tracing().start(
            TracingConfig(sampling_rate=0.5, exporter=ConsoleExporter())
        )
        tracing.tracer.start_root_span({"name": "job"}, run_job)
        ```
    """

    def __init__(self):
        self.tracer = CoreTracer()
        self.exporter: Exporter = NoopExporter()
        self.config: Optional[TracingConfig] = None
        self.logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    @property
    def active(self) -> bool:
        return self.tracer.active

    def start(self, config: Optional[TracingConfig] = None) -> "Tracing":
        """
        Enable tracing.

        Args:
            config: Tracing configuration; defaults apply when omitted

        Returns:
            The tracing object
        """
        self.config = config or TracingConfig()
        if self.config.logger is not None:
            self.logger = self.config.logger
        self.logger.setLevel(LOG_LEVELS[self.config.log_level])

        self.tracer.start(self.config.tracer_config())
        self.register_exporter(self.config.exporter or self.exporter)
        self.logger.info(f"Tracing started with sampler {self.tracer.sampler.description}")
        return self

    def stop(self) -> None:
        """Disable tracing and detach the exporter."""
        self.tracer.stop()
        self.tracer.unregister_span_event_listener(self.exporter)
        self.logger.info("Tracing stopped")

    def register_exporter(self, exporter: Exporter) -> "Tracing":
        """
        Send ended spans to the given exporter instead of the current one.

        Args:
            exporter: The exporter to register

        Returns:
            The tracing object
        """
        self.tracer.unregister_span_event_listener(self.exporter)
        self.exporter = exporter
        self.tracer.register_span_event_listener(exporter)
        self.logger.debug(f"Registered exporter {exporter.__class__.__name__}")
        return self


_default_tracing: Optional[Tracing] = None


def get_tracing() -> Tracing:
    """
    Get or create the process-wide Tracing instance.

    Returns:
        Default tracing instance
    """
    global _default_tracing
    if _default_tracing is None:
        _default_tracing = Tracing()
    return _default_tracing
