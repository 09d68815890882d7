"""Data types for the diagnostic logging subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TokenSamplingRecord:
    """Immutable record of a single token sampling event.

    Attributes:
        timestamp_ns: Monotonic start time of the call (nanoseconds).
        total_sampling_ms: Time spent running the chain (milliseconds).
        token_id: Selected token, or ``None`` if no stage selected one.
        token_prob: Probability of the selected token after the chain ran
            (``0.0`` when unknown).
        num_candidates: Number of entries left in the buffer.
        stages: Class names of the chain's stages, in order.
        settings_hash: 16-char SHA-256 prefix of the active settings.
    """

    # Timing
    timestamp_ns: int
    total_sampling_ms: float

    # Selection
    token_id: int | None
    token_prob: float
    num_candidates: int

    # Chain and settings snapshot
    stages: tuple[str, ...]
    settings_hash: str
