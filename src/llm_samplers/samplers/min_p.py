"""Min-P and Top-A filters.

Both drop entries whose probability falls below a threshold derived from the
most likely entry's probability, and differ only in how that threshold is
computed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from llm_samplers.configure.configurable import ConfigurableSampler
from llm_samplers.configure.metadata import OptionMetadata, SamplerMetadata
from llm_samplers.configure.value import OptionType
from llm_samplers.samplers.base import Sampler
from llm_samplers.samplers.registry import SamplerRegistry

if TYPE_CHECKING:
    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


def _truncate_below(logits: Logits, threshold: float, min_keep: int) -> Logits:
    """Cut at the first entry (from ``max(1, min_keep)``) below *threshold*.

    Expects the buffer sorted and with probabilities computed.
    """
    start = max(1, min_keep)
    below = np.flatnonzero(logits.probs[start:] < threshold)
    if len(below) > 0:
        logits.truncate(start + int(below[0]))
    return logits


@SamplerRegistry.register("min_p")
class MinPSampler(ConfigurableSampler, Sampler):
    """Keep entries with probability of at least ``p * prob[0]``."""

    METADATA = SamplerMetadata(
        name="min-p",
        description="Drop entries less likely than p times the top entry.",
        options=(
            OptionMetadata("p", "Fraction of the top probability to keep.", OptionType.FLOAT),
            OptionMetadata("min_keep", "Minimum number of entries to keep.", OptionType.UINT),
        ),
    )

    def __init__(self, p: float = 0.05, min_keep: int = 1) -> None:
        self.p = p
        self.min_keep = min_keep

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if self.p == 0.0 or not logits:
            return logits
        logits.ensure_sorted().ensure_softmax()
        if len(logits) <= self.min_keep:
            return logits
        threshold = self.p * float(logits.probs[0])
        return _truncate_below(logits, threshold, self.min_keep)


@SamplerRegistry.register("top_a")
class TopASampler(ConfigurableSampler, Sampler):
    """Keep entries with probability of at least ``a1 * prob[0] ** a2``."""

    METADATA = SamplerMetadata(
        name="top-a",
        description="Drop entries below a threshold scaled by the squared top probability.",
        options=(
            OptionMetadata("a1", "Threshold scale.", OptionType.FLOAT),
            OptionMetadata("a2", "Exponent applied to the top probability.", OptionType.FLOAT),
            OptionMetadata("min_keep", "Minimum number of entries to keep.", OptionType.UINT),
        ),
    )

    def __init__(self, a1: float = 0.2, a2: float = 2.0, min_keep: int = 1) -> None:
        self.a1 = a1
        self.a2 = a2
        self.min_keep = min_keep

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if not logits or self.a1 == 0.0 or self.a2 == 0.0:
            return logits
        logits.ensure_sorted().ensure_softmax()
        if len(logits) <= self.min_keep:
            return logits
        threshold = self.a1 * float(logits.probs[0]) ** self.a2
        return _truncate_below(logits, threshold, self.min_keep)
