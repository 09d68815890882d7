"""Slot-based chain builder.

A builder maps slot names to slots. Each slot knows how to create its
sampler and whether it can be configured later:

- ``STATIC``: one fixed instance, never configured through the builder.
- ``SINGLE``: zero or one instance, built on first configure and then
  reconfigured in place.
- ``CHAIN``: zero or more instances; every configure appends a fresh one.

``into_chain()`` flattens the slots in registration order and consumes the
builder: its samplers move into the chain.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from llm_samplers.chain import SamplerChain
from llm_samplers.exceptions import (
    BuilderConsumedError,
    CannotConfigureStaticError,
    ConfigureFailedError,
    ConfigureSamplerError,
    UnknownSlotError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from llm_samplers.configure.configurable import ConfigurableSampler
    from llm_samplers.samplers.base import Sampler

    SamplerFactory = Callable[[], ConfigurableSampler]

logger = logging.getLogger("llm_samplers")


class SlotKind(enum.Enum):
    """How a slot holds and (re)builds its samplers."""

    STATIC = "static"
    SINGLE = "single"
    CHAIN = "chain"


class SamplerSlot:
    """A named position inside a :class:`SamplerChainBuilder`.

    Use the ``static``, ``single`` and ``chain`` constructors rather than
    calling ``__init__`` directly.
    """

    __slots__ = ("_factory", "_kind", "_samplers")

    def __init__(
        self,
        kind: SlotKind,
        factory: Callable[[], Sampler],
        samplers: Iterable[Sampler] = (),
    ) -> None:
        self._kind = kind
        self._factory = factory
        self._samplers: list[Sampler] = list(samplers)

    @classmethod
    def static(cls, factory: Callable[[], Sampler]) -> SamplerSlot:
        """Slot holding exactly one sampler, built immediately."""
        return cls(SlotKind.STATIC, factory, [factory()])

    @classmethod
    def single(cls, factory: SamplerFactory, sampler: ConfigurableSampler | None = None) -> SamplerSlot:
        """Slot holding at most one sampler, built lazily."""
        return cls(SlotKind.SINGLE, factory, [] if sampler is None else [sampler])

    @classmethod
    def chain(cls, factory: SamplerFactory, samplers: Iterable[ConfigurableSampler] = ()) -> SamplerSlot:
        """Slot holding any number of samplers; each configure appends one."""
        return cls(SlotKind.CHAIN, factory, samplers)

    @property
    def kind(self) -> SlotKind:
        return self._kind

    @property
    def samplers(self) -> tuple[Sampler, ...]:
        return tuple(self._samplers)

    def ensure_present(self) -> SamplerSlot:
        """Build one sampler from the factory if the slot is empty."""
        if not self._samplers:
            self._samplers.append(self._factory())
        return self

    def configure(self, text: str) -> None:
        """Configure this slot's sampler(s) from an option string.

        Raises:
            ConfigureSamplerError: If the option string is rejected.
            ValueError: For static slots.
        """
        if self._kind is SlotKind.STATIC:
            raise ValueError("static slots cannot be configured")
        if self._kind is SlotKind.SINGLE and self._samplers:
            self._samplers[0].configure(text)
            return
        sampler = self._factory()
        sampler.configure(text)
        self._samplers.append(sampler)

    def __repr__(self) -> str:
        return f"SamplerSlot({self._kind.value}, samplers={len(self._samplers)})"


class SamplerChainBuilder:
    """Registry of named slots that flattens into a :class:`SamplerChain`.

    Example::

        builder = SamplerChainBuilder([
            ("repetition", SamplerSlot.chain(RepetitionSampler)),
            ("greedy", SamplerSlot.static(GreedySampler)),
        ])
        builder.configure("repetition", "penalty=1.1:last_n=64")
        chain = builder.into_chain()
    """

    def __init__(self, slots: Iterable[tuple[str, SamplerSlot]] = ()) -> None:
        self._slots: dict[str, SamplerSlot] = {}
        self._consumed = False
        for name, slot in slots:
            self.push_slot(name, slot)

    def push_slot(self, name: str, slot: SamplerSlot) -> SamplerChainBuilder:
        """Register *slot* under *name*; re-registering a name replaces the slot in place."""
        self._slots[name] = slot
        return self

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[tuple[str, SamplerSlot]]:
        return iter(self._slots.items())

    def __contains__(self, name: object) -> bool:
        return name in self._slots

    def __getitem__(self, name: str) -> SamplerSlot:
        try:
            return self._slots[name]
        except KeyError:
            raise UnknownSlotError(name) from None

    def configure(self, name: str, text: str) -> None:
        """Configure the slot *name* from an option string.

        Args:
            name: Slot name.
            text: Option string such as ``"penalty=1.1:last_n=64"``.

        Raises:
            UnknownSlotError: If no slot is registered under *name*.
            CannotConfigureStaticError: If the slot is static.
            ConfigureFailedError: If the sampler rejects the option string.
        """
        slot = self[name]
        if slot.kind is SlotKind.STATIC:
            raise CannotConfigureStaticError(name)
        try:
            slot.configure(text)
        except ConfigureSamplerError as err:
            raise ConfigureFailedError(name, err) from err
        logger.debug("Configured slot %r (%s): %r", name, slot.kind.value, text)

    def into_chain(self) -> SamplerChain:
        """Flatten all slots, in registration order, into a new chain.

        The builder is consumed; build a new one for each independent chain.

        Raises:
            BuilderConsumedError: If called a second time.
        """
        if self._consumed:
            raise BuilderConsumedError()
        self._consumed = True
        chain = SamplerChain()
        for _name, slot in self._slots.items():
            for sampler in slot.samplers:
                chain.push_sampler(sampler)
        logger.debug("Built chain with %d stages from %d slots", len(chain), len(self._slots))
        self._slots.clear()
        return chain
