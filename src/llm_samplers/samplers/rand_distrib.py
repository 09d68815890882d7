"""Weighted random selection over the current probabilities."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from llm_samplers.configure.configurable import ConfigurableSampler
from llm_samplers.configure.metadata import SamplerMetadata
from llm_samplers.exceptions import RandomDistributionError
from llm_samplers.samplers.base import Sampler
from llm_samplers.samplers.registry import SamplerRegistry

if TYPE_CHECKING:
    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


def weighted_index(rng: np.random.Generator, weights: np.ndarray) -> int:
    """Draw an index with probability proportional to *weights*.

    Uses a single uniform draw mapped through the cumulative distribution.

    Args:
        rng: Random generator; only ``random()`` is used.
        weights: Non-negative finite weights with a positive sum.

    Returns:
        Index into *weights*.

    Raises:
        RandomDistributionError: If the weights cannot form a distribution.
    """
    if len(weights) == 0:
        raise RandomDistributionError("cannot draw from an empty distribution")
    if not np.all(np.isfinite(weights)) or np.any(weights < 0.0):
        raise RandomDistributionError("weights must be finite and non-negative")
    cdf = np.cumsum(weights)
    total = float(cdf[-1])
    if not total > 0.0:
        raise RandomDistributionError("weights sum to zero")
    u = float(rng.random()) * total
    idx = int(np.searchsorted(cdf, u, side="right"))
    return min(idx, len(weights) - 1)


def select_weighted(resources: SamplerResources, logits: Logits) -> int:
    """Draw a buffer position from *logits*' probabilities using the provider's RNG."""
    logits.ensure_softmax()
    probs = logits.probs
    return resources.with_rng(lambda rng: weighted_index(rng, probs))


@SamplerRegistry.register("rand_distrib")
class RandDistribSampler(ConfigurableSampler, Sampler):
    """Select a token at random, weighted by probability.

    Requires an RNG from the resource provider.
    """

    METADATA = SamplerMetadata(
        name="random distribution",
        description="Select a token at random using its probability as the weight.",
    )

    def __init__(self) -> None:
        self.token_id: int | None = None

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        self.token_id = None
        if not logits:
            return logits
        idx = select_weighted(resources, logits)
        self.token_id = int(logits.token_ids[idx])
        return logits

    def sampled_token_id(self) -> int | None:
        return self.token_id
