"""Resource providers for samplers.

Samplers never hold the random number generator or the token history
themselves. They ask a ``SamplerResources`` provider for transient access
through a callback: the provider hands the resource to the function and takes
it back when the function returns. A provider guarding shared state can hold
its lock only for the duration of the callback.

The RNG contract is a ``numpy.random.Generator`` (anything with a
``random()`` method returning a float in ``[0, 1)`` works). The history
contract is a sequence of token ids, oldest first.
"""

from __future__ import annotations

import threading
from abc import ABC
from typing import TYPE_CHECKING, TypeVar

import numpy as np

from llm_samplers.exceptions import MissingResourceError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

T = TypeVar("T")


class SamplerResources(ABC):
    """Abstract provider of sampler resources.

    Every accessor defaults to raising :class:`MissingResourceError`;
    subclasses override the ones they can satisfy.
    """

    def with_rng(self, fun: Callable[[np.random.Generator], T]) -> T:
        """Call *fun* with the RNG and return its result.

        Raises:
            MissingResourceError: If no RNG is available.
        """
        raise MissingResourceError("rng")

    def with_last_tokens(self, fun: Callable[[Sequence[int]], T]) -> T:
        """Call *fun* with a read-only view of the token history.

        Raises:
            MissingResourceError: If no history is available.
        """
        raise MissingResourceError("last_tokens")

    def with_last_tokens_mut(self, fun: Callable[[list[int]], T]) -> T:
        """Call *fun* with the mutable token history list.

        Raises:
            MissingResourceError: If no history is available.
        """
        raise MissingResourceError("last_tokens")


class NilSamplerResources(SamplerResources):
    """Provider with no resources, for chains that need neither RNG nor history."""

    def __repr__(self) -> str:
        return "NilSamplerResources()"


class SimpleSamplerResources(SamplerResources):
    """Provider holding an optional RNG and an optional token history.

    Args:
        rng: A numpy ``Generator``; ``None`` means no RNG is available.
        last_tokens: Token history, oldest first; ``None`` means no history
            is available (an empty list is a valid, empty history).
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        last_tokens: list[int] | None = None,
    ) -> None:
        self._rng = rng
        self._last_tokens = last_tokens

    @classmethod
    def seeded(cls, seed: int | None, last_tokens: list[int] | None = None) -> SimpleSamplerResources:
        """Build a provider with ``np.random.default_rng(seed)``."""
        return cls(np.random.default_rng(seed), last_tokens)

    def with_rng(self, fun: Callable[[np.random.Generator], T]) -> T:
        if self._rng is None:
            raise MissingResourceError("rng")
        return fun(self._rng)

    def with_last_tokens(self, fun: Callable[[Sequence[int]], T]) -> T:
        if self._last_tokens is None:
            raise MissingResourceError("last_tokens")
        return fun(tuple(self._last_tokens))

    def with_last_tokens_mut(self, fun: Callable[[list[int]], T]) -> T:
        if self._last_tokens is None:
            raise MissingResourceError("last_tokens")
        return fun(self._last_tokens)

    def __repr__(self) -> str:
        return f"SimpleSamplerResources(rng={self._rng is not None}, last_tokens={self._last_tokens!r})"


class LockedSamplerResources(SamplerResources):
    """Wraps another provider and serializes every callback behind a lock.

    The lock is held only while the callback runs, never across a sampler's
    own control flow.
    """

    def __init__(self, inner: SamplerResources, lock: threading.Lock | None = None) -> None:
        self._inner = inner
        self._lock = lock if lock is not None else threading.Lock()

    @property
    def inner(self) -> SamplerResources:
        return self._inner

    def with_rng(self, fun: Callable[[np.random.Generator], T]) -> T:
        with self._lock:
            return self._inner.with_rng(fun)

    def with_last_tokens(self, fun: Callable[[Sequence[int]], T]) -> T:
        with self._lock:
            return self._inner.with_last_tokens(fun)

    def with_last_tokens_mut(self, fun: Callable[[list[int]], T]) -> T:
        with self._lock:
            return self._inner.with_last_tokens_mut(fun)
