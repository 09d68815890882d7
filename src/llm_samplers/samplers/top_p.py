"""Top-P (nucleus) filter."""

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


@SamplerRegistry.register("top_p")
class TopPSampler(ConfigurableSampler, Sampler):
    """Keep the smallest prefix of sorted entries whose mass reaches ``p``.

    ``p >= 1.0`` keeps everything. ``p == 0.0`` keeps ``min_keep`` entries.
    """

    METADATA = SamplerMetadata(
        name="top-p",
        description="Keep the most likely entries whose cumulative probability reaches p.",
        options=(
            OptionMetadata("p", "Cumulative probability cutoff.", OptionType.FLOAT),
            OptionMetadata("min_keep", "Minimum number of entries to keep.", OptionType.UINT),
        ),
    )

    def __init__(self, p: float = 0.9, min_keep: int = 1) -> None:
        self.p = p
        self.min_keep = min_keep

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if not logits or self.p >= 1.0:
            return logits
        logits.ensure_sorted().ensure_softmax()
        cumulative = np.cumsum(logits.probs)
        positions = np.arange(1, len(cumulative) + 1)
        hits = np.flatnonzero((cumulative >= self.p) & (positions >= self.min_keep))
        if len(hits) > 0:
            logits.truncate(int(hits[0]) + 1)
        return logits
