"""Base class for all samplers.

A sampler transforms a :class:`~llm_samplers.logits.Logits` buffer in place
and may report a selected token. Samplers are long-lived: construct once,
call :meth:`Sampler.sample` once per generated token. Any cross-call state
(a Mirostat learning variable, the last selected token) is owned by the
sampler itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


class Sampler(ABC):
    """Abstract base for all samplers.

    Filters and penalizers only implement :meth:`sample`. Selecting samplers
    (greedy, random distribution, Mirostat) also override
    :meth:`sampled_token_id`.
    """

    @abstractmethod
    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        """Transform *logits* in place and return it.

        Args:
            resources: Provider for the RNG and token history.
            logits: Buffer to transform; borrowed for the duration of the call.

        Returns:
            The same buffer, transformed.

        Raises:
            SamplerError: On a missing resource, invariant violation or a
                failed random draw.
        """

    def sampled_token_id(self) -> int | None:
        """Return the token selected by the last :meth:`sample` call, if any."""
        return None

    def sample_token(self, resources: SamplerResources, logits: Logits) -> int | None:
        """Run :meth:`sample`, then return :meth:`sampled_token_id`."""
        return sample_token(self, resources, logits)


def sample_token(sampler: Sampler, resources: SamplerResources, logits: Logits) -> int | None:
    """Shared implementation of :meth:`Sampler.sample_token`."""
    sampler.sample(resources, logits)
    return sampler.sampled_token_id()
