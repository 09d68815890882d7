"""Registry for sampler implementations.

Uses a decorator pattern for registration, mirroring the other registries:
built-in samplers register themselves at import time under a short name
(``"top_k"``, ``"mirostat2"``, ...) that settings and slot factories refer to.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from llm_samplers.samplers.base import Sampler


def _accepts_n_vocab(klass: type) -> bool:
    """Check whether *klass* takes an ``n_vocab`` constructor argument."""
    try:
        sig = inspect.signature(klass)
    except (ValueError, TypeError):
        return False
    return "n_vocab" in sig.parameters


class SamplerRegistry:
    """Registry mapping string names to Sampler classes.

    Built-in samplers register via the ``@SamplerRegistry.register()``
    decorator. The ``build()`` class method instantiates a sampler by name,
    passing ``n_vocab`` when the constructor accepts it.
    """

    _registry: ClassVar[dict[str, type[Sampler]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[Sampler]], type[Sampler]]:
        """Decorator that registers a Sampler class under *name*.

        Args:
            name: Identifier used in settings and slot definitions.

        Returns:
            Decorator that registers the class and returns it unchanged.

        Raises:
            ValueError: If *name* is already registered.
        """

        def decorator(klass: type[Sampler]) -> type[Sampler]:
            if name in cls._registry:
                raise ValueError(f"Sampler '{name}' is already registered")
            cls._registry[name] = klass
            return klass

        return decorator

    @classmethod
    def get(cls, name: str) -> type[Sampler]:
        """Return the sampler class registered under *name*.

        Raises:
            KeyError: If *name* is not registered.
        """
        if name not in cls._registry:
            available = ", ".join(sorted(cls._registry)) or "(none)"
            raise KeyError(f"Unknown sampler '{name}'. Available: {available}")
        return cls._registry[name]

    @classmethod
    def build(cls, name: str, n_vocab: int | None = None, **kwargs: Any) -> Sampler:
        """Instantiate the sampler registered under *name* with its defaults.

        Args:
            name: Registered sampler name.
            n_vocab: Vocabulary size, passed only to samplers that take it.
            **kwargs: Extra constructor arguments.

        Returns:
            A fresh sampler instance.
        """
        klass = cls.get(name)
        if n_vocab is not None and _accepts_n_vocab(klass):
            kwargs.setdefault("n_vocab", n_vocab)
        return klass(**kwargs)

    @classmethod
    def list_registered(cls) -> list[str]:
        """Return sorted list of registered sampler names."""
        return sorted(cls._registry)
