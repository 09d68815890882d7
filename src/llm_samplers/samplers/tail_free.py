"""Tail-free sampling.

Finds where the sorted probability curve flattens out, using the normalized
absolute second derivative, and cuts the tail beyond it.
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


@SamplerRegistry.register("tail_free")
class TailFreeSampler(ConfigurableSampler, Sampler):
    """Tail-free filter with cutoff ``z``; ``z >= 1.0`` disables it."""

    METADATA = SamplerMetadata(
        name="tail free",
        description="Cut the tail where the second derivative of the sorted probabilities flattens.",
        options=(
            OptionMetadata("z", "Cumulative second-derivative cutoff.", OptionType.FLOAT),
            OptionMetadata("min_keep", "Minimum number of entries to keep.", OptionType.UINT),
        ),
    )

    def __init__(self, z: float = 1.0, min_keep: int = 1) -> None:
        self.z = z
        self.min_keep = min_keep

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if self.z >= 1.0 or len(logits) < 2:
            return logits
        logits.ensure_sorted().ensure_softmax()
        first = np.diff(logits.probs)
        second = np.abs(np.diff(first))
        total = float(np.sum(second))
        if total == 0.0:
            return logits
        cumulative = np.cumsum(second / total)
        positions = np.arange(len(cumulative))
        hits = np.flatnonzero((cumulative > self.z) & (positions >= self.min_keep))
        if len(hits) > 0:
            logits.truncate(int(hits[0]))
        return logits
