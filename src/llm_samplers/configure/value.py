"""Option kinds, tagged option values and literal parsing.

Option values cross the configuration boundary as an ``OptionValue``: a
kind tag plus a plain Python scalar. Numeric kinds use a 64-bit common
representation (``int`` in ``[0, 2**64)`` and ``float`` as an IEEE double).
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from llm_samplers.exceptions import ConversionFailureError

UINT_MAX = 2**64 - 1

_UINT_RE = re.compile(r"[0-9]+")
_TRUE_LITERALS = frozenset({"true", "t", "yes", "1"})
_FALSE_LITERALS = frozenset({"false", "f", "no", "0"})


class OptionType(enum.Enum):
    """Kind of a sampler option."""

    UINT = "uint"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class OptionValue:
    """A sampler option value tagged with its kind.

    Attributes:
        kind: The option kind.
        value: ``int`` for UINT, ``float`` for FLOAT, ``bool`` for BOOL,
            ``str`` for STRING.
    """

    kind: OptionType
    value: int | float | bool | str

    @classmethod
    def uint(cls, value: int) -> OptionValue:
        return cls(OptionType.UINT, value)

    @classmethod
    def real(cls, value: float) -> OptionValue:
        return cls(OptionType.FLOAT, value)

    @classmethod
    def boolean(cls, value: bool) -> OptionValue:
        return cls(OptionType.BOOL, value)

    @classmethod
    def string(cls, value: str) -> OptionValue:
        return cls(OptionType.STRING, value)


def parse_value(kind: OptionType, text: str, key: str = "") -> OptionValue:
    """Parse a literal into an option value of *kind*.

    Grammar:
        - UINT: decimal digits.
        - FLOAT: a decimal float, or ``inf`` / ``+inf`` / ``-inf``
          (case-insensitive).
        - BOOL: ``true``, ``t``, ``yes``, ``1`` or ``false``, ``f``, ``no``,
          ``0`` (case-sensitive).
        - STRING: the trimmed text, verbatim.

    Args:
        kind: Kind of the option being set.
        text: The literal (surrounding whitespace is ignored).
        key: Option key, used in error messages.

    Returns:
        The parsed value.

    Raises:
        ConversionFailureError: If *text* is not a valid literal for *kind*.
    """
    text = text.strip()
    if kind is OptionType.UINT:
        return OptionValue.uint(_parse_uint(text, key))
    if kind is OptionType.FLOAT:
        return OptionValue.real(_parse_float(text, key))
    if kind is OptionType.BOOL:
        return OptionValue.boolean(_parse_bool(text, key))
    return OptionValue.string(text)


def _parse_uint(text: str, key: str) -> int:
    if not _UINT_RE.fullmatch(text):
        raise ConversionFailureError(key, f"{text!r} is not an unsigned integer")
    value = int(text)
    if value > UINT_MAX:
        raise ConversionFailureError(key, f"{text!r} is out of range")
    return value


def _parse_float(text: str, key: str) -> float:
    lowered = text.lower()
    if lowered in ("inf", "+inf"):
        return float("inf")
    if lowered == "-inf":
        return float("-inf")
    if "_" in text:
        raise ConversionFailureError(key, f"{text!r} is not a number")
    try:
        return float(text)
    except ValueError:
        raise ConversionFailureError(key, f"{text!r} is not a number") from None


def _parse_bool(text: str, key: str) -> bool:
    if text in _TRUE_LITERALS:
        return True
    if text in _FALSE_LITERALS:
        return False
    raise ConversionFailureError(key, f"{text!r} is not a boolean")
