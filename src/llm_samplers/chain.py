"""Sampler chain: an ordered pipeline of samplers.

The chain is itself a :class:`~llm_samplers.samplers.base.Sampler`, so
chains nest. Each call resets the cached token, folds the stages over the
logits buffer and keeps the most recent non-empty token report. The first
failure aborts the call and propagates unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from llm_samplers.samplers.base import Sampler

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources


class SamplerChain(Sampler):
    """Sequentially applies a list of samplers.

    Filters and penalizers go first, followed by a single selecting stage.
    The chain does not validate ordering.

    Example::

        chain = SamplerChain() + FlatBiasSampler([(3, -inf)]) + GreedySampler()
        token = chain.sample_token(NilSamplerResources(), Logits(scores))
    """

    def __init__(self, samplers: Iterable[Sampler] = ()) -> None:
        self._samplers: list[Sampler] = list(samplers)
        self._token: int | None = None

    def push_sampler(self, sampler: Sampler) -> SamplerChain:
        """Append *sampler* and return the chain for fluent use."""
        self._samplers.append(sampler)
        return self

    def __add__(self, sampler: Sampler) -> SamplerChain:
        """Return a new chain with *sampler* appended; ``self`` is unchanged."""
        return SamplerChain([*self._samplers, sampler])

    def __iadd__(self, sampler: Sampler) -> SamplerChain:
        return self.push_sampler(sampler)

    def __len__(self) -> int:
        return len(self._samplers)

    def __iter__(self) -> Iterator[Sampler]:
        return iter(self._samplers)

    def __repr__(self) -> str:
        names = ", ".join(type(s).__name__ for s in self._samplers)
        return f"SamplerChain([{names}])"

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        self._token = None
        for sampler in self._samplers:
            logits = sampler.sample(resources, logits)
            token = sampler.sampled_token_id()
            if token is not None:
                self._token = token
        return logits

    def sampled_token_id(self) -> int | None:
        return self._token
