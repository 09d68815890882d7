"""Mirostat v1 and v2 adaptive selectors.

Both keep a running target surprise ``mu`` that is nudged after every
selection so the observed surprise (``-log2`` of the selected probability)
tracks ``tau``. See https://arxiv.org/abs/2007.14966.

Setting ``tau`` through the option interface resets ``mu`` to ``2 * tau``.
Setting ``mu`` afterwards overrides that.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from llm_samplers.configure.configurable import ConfigurableSampler
from llm_samplers.configure.metadata import OptionMetadata, SamplerMetadata
from llm_samplers.configure.value import OptionType
from llm_samplers.exceptions import InternalSamplerError
from llm_samplers.samplers.base import Sampler
from llm_samplers.samplers.rand_distrib import select_weighted
from llm_samplers.samplers.registry import SamplerRegistry
from llm_samplers.samplers.top_k import TopKSampler

if TYPE_CHECKING:
    from llm_samplers.logits import Logits
    from llm_samplers.resources import SamplerResources

_TAU = OptionMetadata("tau", "Target surprise.", OptionType.FLOAT)
_ETA = OptionMetadata("eta", "Learning rate for mu.", OptionType.FLOAT)
_MU = OptionMetadata("mu", "Current maximum surprise; reset to 2 * tau when tau is set.", OptionType.FLOAT)


class _MirostatBase(ConfigurableSampler, Sampler):
    """State and update rule shared by both Mirostat versions."""

    def __init__(self, tau: float = 5.0, eta: float = 0.1, mu: float | None = None) -> None:
        self.tau = tau
        self.eta = eta
        self.mu = tau * 2.0 if mu is None else mu
        self.token_id: int | None = None

    def post_set_option(self, md: OptionMetadata) -> None:
        if md.key == "tau":
            self.mu = self.tau * 2.0

    def sampled_token_id(self) -> int | None:
        return self.token_id

    def _select_and_update(self, resources: SamplerResources, logits: Logits) -> None:
        idx = select_weighted(resources, logits)
        prob = float(logits.probs[idx])
        surprise = -math.log2(prob) if prob > 0.0 else math.inf
        self.mu -= self.eta * (surprise - self.tau)
        self.token_id = int(logits.token_ids[idx])


@SamplerRegistry.register("mirostat1")
class Mirostat1Sampler(_MirostatBase):
    """Mirostat v1: estimate the Zipf exponent, derive a Top-K size, select.

    Requires the vocabulary size ``n_vocab``; ``m`` is the number of top
    probabilities used for the Zipf estimate.
    """

    METADATA = SamplerMetadata(
        name="mirostat 1",
        description="See: https://arxiv.org/abs/2007.14966",
        options=(
            _TAU,
            _ETA,
            _MU,
            OptionMetadata("m", "Number of top probabilities used to estimate the Zipf exponent.", OptionType.UINT),
            OptionMetadata("n_vocab", "Vocabulary size of the model.", OptionType.UINT),
        ),
    )

    def __init__(
        self,
        n_vocab: int = 0,
        tau: float = 5.0,
        eta: float = 0.1,
        mu: float | None = None,
        m: int = 100,
    ) -> None:
        super().__init__(tau, eta, mu)
        self.n_vocab = n_vocab
        self.m = m

    def estimate_k(self, probs: np.ndarray) -> int:
        """Derive the Top-K size from the sorted probabilities and ``mu``.

        Returns:
            The truncation size; at least 1 and at most ``len(probs)``.
        """
        count = min(self.m - 1, len(probs) - 1)
        if count <= 0:
            return 1
        idx = np.arange(count, dtype=np.float64)
        t_i = np.log((idx + 2.0) / (idx + 1.0))
        with np.errstate(all="ignore"):
            b_i = probs[:count] / probs[1 : count + 1]
            s_hat = np.sum(t_i * b_i) / np.sum(t_i * t_i)
            eps_hat = s_hat - 1.0
            k = ((eps_hat * np.float64(2.0) ** self.mu) / (1.0 - np.float64(self.n_vocab) ** -eps_hat)) ** (
                1.0 / s_hat
            )
        if np.isnan(k):
            return 1
        if np.isinf(k):
            return len(probs) if k > 0 else 1
        return min(max(int(k), 1), len(probs))

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        self.token_id = None
        if not logits or self.m < 1:
            return logits
        if self.n_vocab == 0:
            raise InternalSamplerError("Mirostat v1 sampler requires n_vocab")

        logits.ensure_sorted().ensure_softmax()
        k = self.estimate_k(logits.probs)
        logits.sample(resources, TopKSampler(k, 1))
        self._select_and_update(resources, logits)
        return logits


@SamplerRegistry.register("mirostat2")
class Mirostat2Sampler(_MirostatBase):
    """Mirostat v2: drop entries more surprising than ``mu``, then select."""

    METADATA = SamplerMetadata(
        name="mirostat 2",
        description="See: https://arxiv.org/abs/2007.14966",
        options=(_TAU, _ETA, _MU),
    )

    def sample(self, resources: SamplerResources, logits: Logits) -> Logits:
        self.token_id = None
        if not logits:
            return logits

        logits.ensure_sorted().ensure_softmax()
        with np.errstate(divide="ignore"):
            surprise = -np.log2(logits.probs)
        over = np.flatnonzero(surprise > self.mu)
        if len(over) > 0:
            logits.truncate(max(int(over[0]), 1))
        logits.ensure_softmax()
        self._select_and_update(resources, logits)
        return logits
