"""Top-K filter: keep the ``k`` highest-logit entries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from llm_samplers.configure.configurable import ConfigurableSampler
from llm_samplers.configure.metadata import OptionMetadata, SamplerMetadata
from llm_samplers.configure.value import OptionType
from llm_samplers.samplers.base import Sampler
from llm_samplers.samplers.registry import SamplerRegistry

if TYPE_CHECKING:
    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


@SamplerRegistry.register("top_k")
class TopKSampler(ConfigurableSampler, Sampler):
    """Truncate to the ``k`` most likely tokens.

    The effective size is ``k`` raised to ``min_keep`` and capped at the
    buffer length.
    """

    METADATA = SamplerMetadata(
        name="top-k",
        description="Keep only the k entries with the highest logits.",
        options=(
            OptionMetadata("k", "Number of entries to keep.", OptionType.UINT),
            OptionMetadata("min_keep", "Minimum number of entries to keep.", OptionType.UINT),
        ),
    )

    def __init__(self, k: int = 40, min_keep: int = 1) -> None:
        self.k = k
        self.min_keep = min_keep

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        k = min(max(self.k, self.min_keep), len(logits))
        logits.ensure_sorted()
        return logits.truncate(k)
