"""Temperature scaling."""

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


@SamplerRegistry.register("temperature")
class TemperatureSampler(ConfigurableSampler, Sampler):
    """Divide every logit by ``temperature``; ``0.0`` leaves logits untouched.

    Values below 1.0 sharpen the distribution, values above flatten it.
    """

    METADATA = SamplerMetadata(
        name="temperature",
        description="Scale logits by 1 / temperature.",
        options=(OptionMetadata("temperature", "Temperature value.", OptionType.FLOAT),),
    )

    def __init__(self, temperature: float = 1.0) -> None:
        self.temperature = temperature

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if self.temperature == 0.0 or not logits:
            return logits
        return logits.update_logits(logits.logits / self.temperature)
