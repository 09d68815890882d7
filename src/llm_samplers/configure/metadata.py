"""Sampler and option metadata, plus option lookup by key.

Each configurable sampler describes itself with a ``SamplerMetadata``: a
name, an optional description and an ordered tuple of ``OptionMetadata``.
At runtime the metadata is paired with accessors bound to the live sampler
to form a ``SamplerOptions`` list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from llm_samplers.exceptions import AmbiguousKeyError, UnknownOrBadTypeError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from llm_samplers.configure.value import OptionType


@dataclass(frozen=True, slots=True)
class OptionMetadata:
    """Definition of one sampler option.

    Attributes:
        key: Option name; also the attribute it is bound to by default.
        description: Optional human-readable description.
        option_type: Kind of value the option holds.
    """

    key: str
    description: str | None
    option_type: OptionType


@dataclass(frozen=True, slots=True)
class SamplerMetadata:
    """Definition of a configurable sampler."""

    name: str
    description: str | None = None
    options: tuple[OptionMetadata, ...] = ()


@dataclass(frozen=True, slots=True)
class OptionAccessor:
    """Getter/setter pair bound to one field of a live sampler."""

    get: Callable[[], Any]
    set: Callable[[Any], None]

    @classmethod
    def for_attribute(cls, obj: object, attr: str) -> OptionAccessor:
        """Bind an accessor to ``obj.attr``."""
        return cls(
            get=lambda: getattr(obj, attr),
            set=lambda value: setattr(obj, attr, value),
        )


class SamplerOptions:
    """Ordered ``(metadata, accessor)`` pairs for one sampler instance.

    An accessor of ``None`` means the option is declared but its value
    cannot be read or written.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[tuple[OptionMetadata, OptionAccessor | None]] = ()) -> None:
        self._entries = list(entries)

    @classmethod
    def for_attributes(cls, obj: object, options: Iterable[OptionMetadata]) -> SamplerOptions:
        """Pair each option with an accessor for the attribute named by its key."""
        return cls((md, OptionAccessor.for_attribute(obj, md.key)) for md in options)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> tuple[OptionMetadata, OptionAccessor | None]:
        return self._entries[index]

    def __iter__(self) -> Iterator[tuple[OptionMetadata, OptionAccessor | None]]:
        return iter(self._entries)

    def find_option_definition(self, key: str) -> tuple[OptionMetadata, int | None]:
        """Resolve *key* to exactly one option.

        An exact key match wins. Otherwise *key* must be a prefix of exactly
        one option key (case-sensitive). The empty key is a prefix of every
        option, so it resolves only when a single option exists.

        Args:
            key: Full option key or an unambiguous prefix of one.

        Returns:
            Tuple of (option metadata, index into this list or ``None`` when
            the option has no accessor).

        Raises:
            UnknownOrBadTypeError: If nothing matches.
            AmbiguousKeyError: If several options match.
        """
        key = key.strip()
        matches: list[int] = []
        for idx, (md, _acc) in enumerate(self._entries):
            if md.key == key:
                matches = [idx]
                break
            if md.key.startswith(key):
                matches.append(idx)

        if not matches:
            raise UnknownOrBadTypeError(key)
        if len(matches) > 1:
            raise AmbiguousKeyError(key)

        idx = matches[0]
        md, acc = self._entries[idx]
        return md, (idx if acc is not None else None)
