"""Greedy selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from llm_samplers.configure.configurable import ConfigurableSampler
from llm_samplers.configure.metadata import SamplerMetadata
from llm_samplers.samplers.base import Sampler
from llm_samplers.samplers.registry import SamplerRegistry

if TYPE_CHECKING:
    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


@SamplerRegistry.register("greedy")
class GreedySampler(ConfigurableSampler, Sampler):
    """Select the entry with the highest logit.

    Ties go to the entry that comes first in the current buffer order. The
    buffer itself is left unchanged.
    """

    METADATA = SamplerMetadata(
        name="greedy",
        description="Select the token with the highest logit.",
    )

    def __init__(self) -> None:
        self.token_id: int | None = None

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        self.token_id = None
        if logits:
            self.token_id = int(logits.token_ids[int(np.argmax(logits.logits))])
        return logits

    def sampled_token_id(self) -> int | None:
        return self.token_id
