"""Per-token sampling driver for autoregressive generation loops.

A ``SamplingSession`` owns the chain, the RNG and the bounded token history
for one generation. Call :meth:`SamplingSession.sample` once per generated
token with the model's raw scores.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import TYPE_CHECKING

import numpy as np

from llm_samplers.config import build_chain_builder
from llm_samplers.logging.logger import SamplingLogger
from llm_samplers.logging.types import TokenSamplingRecord
from llm_samplers.logits import Logits
from llm_samplers.resources import LockedSamplerResources, SimpleSamplerResources

if TYPE_CHECKING:
    from collections.abc import Iterable

    from llm_samplers.chain import SamplerChain
    from llm_samplers.config import SamplerSettings

logger = logging.getLogger("llm_samplers")


def _settings_hash(settings: SamplerSettings) -> str:
    """Compute a short hash of the settings for logging.

    Returns:
        First 16 hex characters of the SHA-256 digest of the settings dump.
    """
    raw = settings.model_dump_json().encode("utf-8")
    return hashlib.sha256(raw).hexdigest()[:16]


class SamplingSession:
    """Runs a sampler chain over successive score vectors.

    The RNG and history live in a :class:`SimpleSamplerResources` behind a
    :class:`LockedSamplerResources`, so a session can be shared between
    threads that serialize their calls to :meth:`sample`.

    Args:
        chain: The configured sampler chain.
        settings: Settings providing the seed, history size and logging.
        rng: RNG to use instead of one seeded from ``settings.seed``.
        history: Initial token history (e.g. the prompt), oldest first.
    """

    def __init__(
        self,
        chain: SamplerChain,
        settings: SamplerSettings,
        rng: np.random.Generator | None = None,
        history: Iterable[int] | None = None,
    ) -> None:
        self._chain = chain
        self._settings = settings
        self._history: list[int] = [] if history is None else [int(t) for t in history]
        self._trim_history(self._history)
        if rng is None:
            rng = np.random.default_rng(settings.seed)
        self._resources = LockedSamplerResources(SimpleSamplerResources(rng, self._history))
        self._logger = SamplingLogger(settings)
        self._settings_hash = _settings_hash(settings)
        self._stages = tuple(type(s).__name__ for s in chain)

        logger.debug(
            "SamplingSession initialized: stages=%s, history_size=%d, seed=%s",
            ", ".join(self._stages) or "(none)",
            settings.history_size,
            settings.seed,
        )

    @classmethod
    def from_settings(
        cls,
        settings: SamplerSettings,
        n_vocab: int | None = None,
        history: Iterable[int] | None = None,
    ) -> SamplingSession:
        """Build the standard chain from *settings* and wrap it in a session."""
        chain = build_chain_builder(settings, n_vocab).into_chain()
        return cls(chain, settings, history=history)

    @property
    def chain(self) -> SamplerChain:
        return self._chain

    @property
    def history(self) -> tuple[int, ...]:
        """Snapshot of the retained token history, oldest first."""
        return self._resources.with_last_tokens(tuple)

    @property
    def sampling_logger(self) -> SamplingLogger:
        return self._logger

    def _trim_history(self, tokens: list[int]) -> None:
        excess = len(tokens) - self._settings.history_size
        if excess > 0:
            del tokens[:excess]

    def _push_token(self, token_id: int) -> None:
        def push(tokens: list[int]) -> None:
            tokens.append(token_id)
            self._trim_history(tokens)

        self._resources.with_last_tokens_mut(push)

    def sample(self, scores: Iterable[float] | np.ndarray) -> int | None:
        """Select the next token from raw model scores.

        Args:
            scores: Per-token scores, indexed by token id.

        Returns:
            The selected token id, or ``None`` if no stage selected one.

        Raises:
            InvalidLogitError: If *scores* contains NaN.
            SamplerError: If any stage fails; the history is left unchanged.
        """
        t_start_ns = time.perf_counter_ns()
        logits = Logits(scores)
        logits = self._chain.sample(self._resources, logits)
        token_id = self._chain.sampled_token_id()

        token_prob = 0.0
        if token_id is not None:
            self._push_token(token_id)
            # Softmax may reorder the buffer, so look the token up afterwards.
            logits.ensure_softmax()
            idx = logits.find(token_id)
            if idx is not None:
                token_prob = float(logits.probs[idx])

        t_end_ns = time.perf_counter_ns()
        record = TokenSamplingRecord(
            timestamp_ns=t_start_ns,
            total_sampling_ms=(t_end_ns - t_start_ns) / 1_000_000.0,
            token_id=token_id,
            token_prob=token_prob,
            num_candidates=len(logits),
            stages=self._stages,
            settings_hash=self._settings_hash,
        )
        self._logger.log_token(record)
        return token_id
