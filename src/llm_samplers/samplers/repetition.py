"""Repetition and frequency/presence penalties.

Both read the trailing ``last_n`` tokens of the history through the resource
provider and lower the logits of tokens that already appeared.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from llm_samplers.configure.configurable import ConfigurableSampler
from llm_samplers.configure.metadata import OptionMetadata, SamplerMetadata
from llm_samplers.configure.value import OptionType
from llm_samplers.samplers.base import Sampler
from llm_samplers.samplers.registry import SamplerRegistry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


def trailing_window(tokens: Sequence[int], last_n: int) -> Sequence[int]:
    """Return the last *last_n* items of *tokens* (all of them if fewer)."""
    if last_n >= len(tokens):
        return tokens
    return tokens[len(tokens) - last_n :]


@SamplerRegistry.register("repetition")
class RepetitionSampler(ConfigurableSampler, Sampler):
    """Multiplicative repetition penalty.

    Positive logits of recently seen tokens are divided by ``penalty``,
    non-positive ones multiplied by it. The sampler is disabled when
    ``last_n == 0`` or when ``penalty`` is ``1.0`` or not positive.
    """

    METADATA = SamplerMetadata(
        name="repetition",
        description="Penalize tokens that appear in the recent history.",
        options=(
            OptionMetadata("penalty", "Penalty factor; 1.0 disables it.", OptionType.FLOAT),
            OptionMetadata("last_n", "Number of trailing history tokens to consider.", OptionType.UINT),
        ),
    )

    def __init__(self, penalty: float = 1.0, last_n: int = 64) -> None:
        self.penalty = penalty
        self.last_n = last_n

    @property
    def enabled(self) -> bool:
        return self.last_n > 0 and self.penalty > 0.0 and self.penalty != 1.0

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if not logits or not self.enabled:
            return logits
        seen = resources.with_last_tokens(lambda tokens: set(trailing_window(tokens, self.last_n)))
        if not seen:
            return logits

        values = logits.logits.copy()
        changed = False
        for idx, token_id in enumerate(logits.token_ids.tolist()):
            if token_id not in seen:
                continue
            if values[idx] <= 0.0:
                values[idx] *= self.penalty
            else:
                values[idx] /= self.penalty
            changed = True
        if changed:
            logits.update_logits(values)
        return logits


@SamplerRegistry.register("freq_presence")
class FreqPresenceSampler(ConfigurableSampler, Sampler):
    """Additive frequency and presence penalties.

    For a token seen ``c > 0`` times in the window, subtracts
    ``c * frequency_penalty + presence_penalty`` from its logit.
    """

    METADATA = SamplerMetadata(
        name="frequency/presence",
        description="Subtract penalties based on how often tokens appear in the recent history.",
        options=(
            OptionMetadata("frequency_penalty", "Penalty per occurrence.", OptionType.FLOAT),
            OptionMetadata("presence_penalty", "Penalty for appearing at all.", OptionType.FLOAT),
            OptionMetadata("last_n", "Number of trailing history tokens to consider.", OptionType.UINT),
        ),
    )

    def __init__(
        self,
        frequency_penalty: float = 0.0,
        presence_penalty: float = 0.0,
        last_n: int = 64,
    ) -> None:
        self.frequency_penalty = frequency_penalty
        self.presence_penalty = presence_penalty
        self.last_n = last_n

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        if (
            not logits
            or self.last_n == 0
            or (self.frequency_penalty == 0.0 and self.presence_penalty == 0.0)
        ):
            return logits
        counts = resources.with_last_tokens(lambda tokens: Counter(trailing_window(tokens, self.last_n)))
        if not counts:
            return logits

        values = logits.logits.copy()
        changed = False
        for idx, token_id in enumerate(logits.token_ids.tolist()):
            count = counts.get(token_id, 0)
            if count > 0:
                values[idx] -= count * self.frequency_penalty + self.presence_penalty
                changed = True
        if changed:
            logits.update_logits(values)
        return logits
