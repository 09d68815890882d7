"""Flat per-token logit bias."""

from __future__ import annotations

from typing import TYPE_CHECKING

from llm_samplers.configure.configurable import ConfigurableSampler
from llm_samplers.configure.metadata import SamplerMetadata
from llm_samplers.samplers.base import Sampler
from llm_samplers.samplers.registry import SamplerRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


@SamplerRegistry.register("flat_bias")
class FlatBiasSampler(ConfigurableSampler, Sampler):
    """Add a fixed delta to the logits of selected tokens.

    A delta of ``-inf`` effectively bans a token. When a token id appears
    more than once in *bias*, the first entry wins.

    Args:
        bias: Iterable of ``(token_id, delta)`` pairs.
    """

    METADATA = SamplerMetadata(
        name="flat bias",
        description="Add a fixed value to the logits of specific tokens.",
    )

    def __init__(self, bias: Iterable[tuple[int, float]] = ()) -> None:
        self.bias: dict[int, float] = {}
        for token_id, delta in bias:
            self.bias.setdefault(int(token_id), float(delta))

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if not self.bias or not logits:
            return logits
        values = logits.logits.copy()
        changed = False
        for token_id, delta in self.bias.items():
            idx = logits.find(token_id)
            if idx is not None:
                values[idx] += delta
                changed = True
        if changed:
            logits.update_logits(values)
        return logits
