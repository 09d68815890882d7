"""Logits container shared by every sampler.

A ``Logits`` buffer holds per-token ``(token_id, logit, prob)`` triples as
three parallel numpy arrays, plus two validity flags:

- ``is_sorted``: entries are non-increasing by logit, entry 0 is the maximum.
- ``has_softmax``: ``probs`` reflects the current logits and membership.

Invalidation rule: any write to logit values clears both flags; any change
of membership (truncation, selection) clears ``has_softmax``. Samplers never
write the arrays directly; they go through :meth:`Logits.update_logits`,
:meth:`Logits.truncate` and :meth:`Logits.select` so the rule holds
everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from llm_samplers.exceptions import InternalSamplerError, InvalidLogitError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from llm_samplers.resources import SamplerResources
    from llm_samplers.samplers.base import Sampler


@dataclass(frozen=True, slots=True)
class Logit:
    """A single entry of a logits buffer.

    Attributes:
        token_id: Vocabulary index of the token.
        logit: Unnormalized model score. Authoritative.
        prob: Probability; only meaningful after a softmax pass.
    """

    token_id: int
    logit: float
    prob: float


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


class Logits:
    """Mutable buffer of logit entries for one sampling call.

    Construct from raw model scores; token ids are assigned by position::

        logits = Logits([0.1, 0.2, 0.3, 0.4])
        logits.softmax()
        logits[0]  # Logit(token_id=3, logit=0.4, prob=...)
    """

    __slots__ = ("_has_softmax", "_logits", "_probs", "_sorted", "_token_ids")

    def __init__(self, scores: Iterable[float] | np.ndarray) -> None:
        """Build a buffer from raw scores.

        Args:
            scores: Per-token scores; entry *i* becomes token id *i*.

        Raises:
            InvalidLogitError: If any score is NaN (reports the first index).
        """
        if not isinstance(scores, np.ndarray):
            scores = list(scores)
        values = np.array(scores, dtype=np.float64).reshape(-1)
        nan_mask = np.isnan(values)
        if nan_mask.any():
            raise InvalidLogitError(int(np.argmax(nan_mask)))
        self._token_ids = np.arange(len(values), dtype=np.int64)
        self._logits = values
        self._probs = np.zeros_like(values)
        self._sorted = False
        self._has_softmax = False

    @classmethod
    def _from_arrays(
        cls,
        token_ids: np.ndarray,
        logits: np.ndarray,
        probs: np.ndarray,
        is_sorted: bool,
        has_softmax: bool,
    ) -> Logits:
        obj = cls.__new__(cls)
        obj._token_ids = token_ids
        obj._logits = logits
        obj._probs = probs
        obj._sorted = is_sorted
        obj._has_softmax = has_softmax
        return obj

    # --- Read access ---

    @property
    def token_ids(self) -> np.ndarray:
        """Read-only view of the token ids, in buffer order."""
        return _readonly(self._token_ids)

    @property
    def logits(self) -> np.ndarray:
        """Read-only view of the logit values, in buffer order."""
        return _readonly(self._logits)

    @property
    def probs(self) -> np.ndarray:
        """Read-only view of the probabilities (stale unless ``has_softmax``)."""
        return _readonly(self._probs)

    @property
    def is_sorted(self) -> bool:
        return self._sorted

    @property
    def has_softmax(self) -> bool:
        return self._has_softmax

    def __len__(self) -> int:
        return len(self._logits)

    def __bool__(self) -> bool:
        return len(self._logits) > 0

    def __getitem__(self, index: int) -> Logit:
        return Logit(
            token_id=int(self._token_ids[index]),
            logit=float(self._logits[index]),
            prob=float(self._probs[index]),
        )

    def __iter__(self) -> Iterator[Logit]:
        for i in range(len(self._logits)):
            yield self[i]

    def __repr__(self) -> str:
        return (
            f"Logits(len={len(self)}, sorted={self._sorted}, "
            f"softmax={self._has_softmax})"
        )

    def find(self, token_id: int) -> int | None:
        """Return the buffer position of *token_id*, or ``None`` if absent."""
        hits = np.flatnonzero(self._token_ids == token_id)
        if len(hits) == 0:
            return None
        return int(hits[0])

    def copy(self) -> Logits:
        """Return an independent copy, flags included."""
        return Logits._from_arrays(
            self._token_ids.copy(),
            self._logits.copy(),
            self._probs.copy(),
            self._sorted,
            self._has_softmax,
        )

    # --- Mutation ---

    def update_logits(self, values: np.ndarray) -> Logits:
        """Replace the logit values in place (same length, same order).

        Clears both the sorted and softmax flags.
        """
        if len(values) != len(self._logits):
            raise InternalSamplerError(
                f"logit update length mismatch: {len(values)} != {len(self._logits)}"
            )
        self._logits = np.asarray(values, dtype=np.float64)
        self._sorted = False
        self._has_softmax = False
        return self

    def truncate(self, n: int) -> Logits:
        """Keep only the first *n* entries.

        Sorted order survives truncation; probabilities do not.
        """
        n = max(0, n)
        if n >= len(self._logits):
            return self
        self._token_ids = self._token_ids[:n]
        self._logits = self._logits[:n]
        self._probs = self._probs[:n]
        self._has_softmax = False
        return self

    def select(self, order: np.ndarray) -> Logits:
        """Replace the contents with the entries at positions *order*.

        Used by stages that reorder entries by something other than logit.
        Clears the sorted flag; clears the softmax flag unless *order* is a
        full permutation.
        """
        order = np.asarray(order, dtype=np.intp)
        keeps_all = len(order) == len(self._logits)
        self._token_ids = self._token_ids[order]
        self._logits = self._logits[order]
        self._probs = self._probs[order]
        self._sorted = False
        if not keeps_all:
            self._has_softmax = False
        return self

    def ensure_sorted(self) -> Logits:
        """Stable-sort entries descending by logit, unless already sorted.

        Raises:
            InternalSamplerError: If a logit is NaN (comparison impossible).
        """
        if self._sorted:
            return self
        if np.isnan(self._logits).any():
            raise InternalSamplerError("logit comparison failed: NaN in buffer")
        order = np.argsort(-self._logits, kind="stable")
        self._token_ids = self._token_ids[order]
        self._logits = self._logits[order]
        self._probs = self._probs[order]
        self._sorted = True
        return self

    def softmax(self) -> Logits:
        """Compute probabilities with the shift-by-max trick.

        Sorts first, so entry 0 holds the maximum. No-op on an empty buffer.
        If the maximum is not finite (all ``-inf``, or some ``+inf``), the
        mass is shared equally among the entries equal to the maximum.
        """
        if len(self._logits) == 0:
            return self
        self.ensure_sorted()
        max_l = self._logits[0]
        if np.isfinite(max_l):
            exp_shifted = np.exp(self._logits - max_l)
            self._probs = exp_shifted / np.sum(exp_shifted)
        else:
            mask = (self._logits == max_l).astype(np.float64)
            self._probs = mask / np.sum(mask)
        self._has_softmax = True
        return self

    def ensure_softmax(self) -> Logits:
        """Run :meth:`softmax` only if probabilities are stale."""
        if self._has_softmax:
            return self
        return self.softmax()

    # --- Sampler conveniences ---

    def sample(self, resources: SamplerResources, sampler: Sampler) -> Logits:
        """Run *sampler* over this buffer."""
        return sampler.sample(resources, self)

    def sample_token(self, resources: SamplerResources, sampler: Sampler) -> int | None:
        """Run *sampler* over this buffer and return its selected token."""
        return sampler.sample_token(resources, self)
