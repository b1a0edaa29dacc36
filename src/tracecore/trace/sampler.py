"""
Probability sampler deciding which traces are recorded.
"""

import hashlib
import string

# Trace IDs are mapped into [0, ID_SPACE).
ID_SPACE = 1 << 64
LOWER_ID_HEX_LENGTH = 16


def trace_id_to_int(trace_id: str) -> int:
    """
    Map a trace ID to an integer in [0, 2**64).

    The low 8 bytes of a hex trace ID are used directly. IDs that are empty
    or not hex are hashed first so they still map to a stable value.
    """
    lower = (trace_id or "")[-LOWER_ID_HEX_LENGTH:]
    if lower and all(c in string.hexdigits for c in lower):
        return int(lower, 16)
    digest = hashlib.sha256((trace_id or "").encode("utf-8")).digest()
    return int.from_bytes(digest[-8:], "big")


class Sampler:
    """
    Consistent sampler over trace IDs.

    The decision depends only on the trace ID and the configured threshold,
    so every span of a trace, local or propagated, gets the same answer.
    """

    def __init__(self):
        self.threshold = ID_SPACE
        self.description = "always"

    def always(self) -> "Sampler":
        """Sample every trace."""
        self.threshold = ID_SPACE
        self.description = "always"
        return self

    def never(self) -> "Sampler":
        """Sample no trace."""
        self.threshold = 0
        self.description = "never"
        return self

    def probability(self, probability: float) -> "Sampler":
        """
        Sample a fraction of traces.

        Args:
            probability: Fraction in [0, 1]; values outside are clamped

        Returns:
            The sampler itself
        """
        if probability >= 1:
            return self.always()
        if probability <= 0:
            return self.never()
        self.threshold = int(probability * ID_SPACE)
        self.description = f"probability.{probability}"
        return self

    def should_sample(self, trace_id: str) -> bool:
        """
        Decide whether the trace should be recorded.

        Args:
            trace_id: Trace ID to check

        Returns:
            True if the trace falls below the sampling threshold
        """
        return trace_id_to_int(trace_id) < self.threshold

    def __repr__(self) -> str:
        return f"Sampler({self.description})"
