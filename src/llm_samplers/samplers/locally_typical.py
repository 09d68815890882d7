"""Locally typical sampling.

Keeps the entries whose surprise is closest to the distribution's entropy,
reordering the buffer by that distance.
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


@SamplerRegistry.register("locally_typical")
class LocallyTypicalSampler(ConfigurableSampler, Sampler):
    """Locally typical filter with mass cutoff ``p``; ``p >= 1.0`` disables it.

    Unlike the other filters this leaves the buffer in typicality order, not
    logit order.
    """

    METADATA = SamplerMetadata(
        name="locally typical",
        description="Keep entries whose surprise is closest to the entropy.",
        options=(
            OptionMetadata("p", "Cumulative probability cutoff.", OptionType.FLOAT),
            OptionMetadata("min_keep", "Minimum number of entries to keep.", OptionType.UINT),
        ),
    )

    def __init__(self, p: float = 1.0, min_keep: int = 1) -> None:
        self.p = p
        self.min_keep = min_keep

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if not logits or self.p >= 1.0:
            return logits
        logits.ensure_softmax()
        probs = logits.probs
        with np.errstate(divide="ignore", invalid="ignore"):
            neg_log = -np.log(probs)
            entropy = float(np.nansum(np.where(probs > 0.0, probs * neg_log, 0.0)))
            scores = np.abs(neg_log - entropy)
        order = np.argsort(scores, kind="stable")

        min_keep = max(self.min_keep - 1, 0)
        cumulative = np.cumsum(probs[order])
        positions = np.arange(len(cumulative))
        hits = np.flatnonzero((cumulative > self.p) & (positions >= min_keep))
        keep = int(hits[0]) + 1 if len(hits) > 0 else len(order)
        return logits.select(order[:keep])
