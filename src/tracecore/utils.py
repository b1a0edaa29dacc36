"""
Utility functions for identifiers and timestamps.
"""

from datetime import datetime, timezone
import uuid


def random_trace_id() -> str:
    """
    Generate a new trace ID.

    Returns:
        16 random bytes as 32 lowercase hex characters, without separators
    """
    return uuid.uuid4().hex


def random_span_id() -> str:
    """
    Generate a new span ID.

    Returns:
        8 random bytes as 16 lowercase hex characters
    """
    return uuid.uuid4().hex[:16]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)
