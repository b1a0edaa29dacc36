"""
Configuration objects for the tracer, the exporter buffer and the tracing facade.
"""

from typing import Any, Optional
from dataclasses import dataclass
import logging
import math
import os

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError
from .models import SpanKind

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 100
DEFAULT_BUFFER_TIMEOUT = 20000  # milliseconds
DEFAULT_MAX_FAILED_BATCHES = 10

# 0: disabled, 1: error, 2: warn, 3: info, 4: debug
LOG_LEVELS = {
    0: logging.CRITICAL + 10,
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
}


@dataclass
class BufferConfig:
    """Configuration for an ExporterBuffer."""
    buffer_size: int = DEFAULT_BUFFER_SIZE
    buffer_timeout: int = DEFAULT_BUFFER_TIMEOUT
    max_failed_batches: int = DEFAULT_MAX_FAILED_BATCHES
    logger: Optional[logging.Logger] = None

    def __post_init__(self):
        if self.buffer_size <= 0:
            raise ConfigError(f"buffer_size must be positive, got {self.buffer_size}")
        if self.buffer_timeout <= 0:
            raise ConfigError(f"buffer_timeout must be positive, got {self.buffer_timeout}")
        if self.max_failed_batches < 0:
            raise ConfigError(f"max_failed_batches must not be negative, got {self.max_failed_batches}")


@dataclass
class TracerConfig:
    """Configuration for a CoreTracer."""
    sampling_rate: float = 1.0
    default_kind: SpanKind = SpanKind.SERVER
    logger: Optional[logging.Logger] = None

    def __post_init__(self):
        if not math.isfinite(self.sampling_rate):
            raise ConfigError(f"sampling_rate must be a finite number, got {self.sampling_rate}")


@dataclass
class TracingConfig:
    """
    Full configuration accepted by Tracing.start().

    Combines the tracer and buffer settings with the log level and the
    exporter to register.
    """
    sampling_rate: float = 1.0
    default_kind: SpanKind = SpanKind.SERVER
    buffer_size: int = DEFAULT_BUFFER_SIZE
    buffer_timeout: int = DEFAULT_BUFFER_TIMEOUT
    max_failed_batches: int = DEFAULT_MAX_FAILED_BATCHES
    log_level: int = 2
    exporter: Optional[Any] = None
    logger: Optional[logging.Logger] = None

    def __post_init__(self):
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be between 0 and 4, got {self.log_level}")
        # Fail early on bad values rather than when the tracer or an exporter is built.
        self.tracer_config()
        self.buffer_config()

    def tracer_config(self) -> TracerConfig:
        return TracerConfig(
            sampling_rate=self.sampling_rate,
            default_kind=self.default_kind,
            logger=self.logger,
        )

    def buffer_config(self) -> BufferConfig:
        return BufferConfig(
            buffer_size=self.buffer_size,
            buffer_timeout=self.buffer_timeout,
            max_failed_batches=self.max_failed_batches,
            logger=self.logger,
        )

    @classmethod
    def from_env(cls, prefix: str = "TRACECORE_", **overrides: Any) -> "TracingConfig":
        """
        Build a configuration from environment variables.

        A .env file in the working directory is loaded first. Recognised
        variables (with the default prefix): TRACECORE_SAMPLING_RATE,
        TRACECORE_BUFFER_SIZE, TRACECORE_BUFFER_TIMEOUT, TRACECORE_LOG_LEVEL
        and TRACECORE_DEFAULT_KIND (a SpanKind name such as "CLIENT").

        Args:
            prefix: Prefix of the environment variable names
            **overrides: Values that take precedence over the environment

        Returns:
            A validated TracingConfig

        Raises:
            ConfigError: If a variable cannot be parsed
        """
        load_dotenv(find_dotenv(usecwd=True))

        values = {}
        parsers = {
            "sampling_rate": float,
            "buffer_size": int,
            "buffer_timeout": int,
            "log_level": int,
            "default_kind": lambda raw: SpanKind[raw.strip().upper()],
        }
        for field_name, parse in parsers.items():
            env_name = f"{prefix}{field_name.upper()}"
            raw = os.getenv(env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[field_name] = parse(raw)
            except (KeyError, ValueError) as e:
                raise ConfigError(f"Invalid value for {env_name}: {raw!r}") from e
            logger.debug(f"Loaded {env_name}={raw!r} from environment")

        values.update(overrides)
        return cls(**values)
