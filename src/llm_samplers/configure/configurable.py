"""Configurable sampler capability.

``ConfigurableSampler`` is a mixin: a sampler declares a class-level
``METADATA`` and exposes each option as an attribute of the same name. The
mixin's methods are thin wrappers around the module-level functions
:func:`set_option`, :func:`get_option` and :func:`configure`, so a subclass
that overrides one method can still reach the shared behaviour of another.

Option strings look like::

    key1=value1:key2=value2:keyN=valueN

Keys may be unambiguous prefixes, whitespace around parts is ignored, and a
segment without ``=`` sets the only option of a single-option sampler.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from llm_samplers.configure.metadata import SamplerMetadata, SamplerOptions
from llm_samplers.configure.value import UINT_MAX, OptionType, OptionValue, parse_value
from llm_samplers.exceptions import (
    CannotAccessOptionValueError,
    ConversionFailureError,
    UnknownOrBadTypeError,
)

if TYPE_CHECKING:
    from llm_samplers.configure.metadata import OptionMetadata

logger = logging.getLogger("llm_samplers")


class HasSamplerMetadata:
    """Provides sampler metadata and live option accessors."""

    METADATA: ClassVar[SamplerMetadata] = SamplerMetadata(name="unknown")

    def sampler_metadata(self) -> SamplerMetadata:
        return self.METADATA

    def sampler_options(self) -> SamplerOptions:
        """Return the declared options bound to this instance's attributes."""
        return SamplerOptions.for_attributes(self, self.sampler_metadata().options)


class ConfigurableSampler(HasSamplerMetadata):
    """Mixin giving a sampler get/set-by-key and string configuration."""

    def set_option(self, key: str, value: OptionValue) -> None:
        """Set the option matching *key* to *value*.

        Calls :meth:`pre_set_option` before writing and
        :meth:`post_set_option` afterwards.
        """
        set_option(self, key, value)

    def pre_set_option(self, md: OptionMetadata, value: OptionValue) -> OptionValue:
        """Hook run before an option is written; may replace the value or raise."""
        return value

    def post_set_option(self, md: OptionMetadata) -> None:
        """Hook run after an option is written."""

    def get_option(self, key: str) -> OptionValue:
        """Return the current value of the option matching *key*."""
        return get_option(self, key)

    def configure(self, text: str) -> None:
        """Apply an option string such as ``"p=0.9:min_keep=2"``."""
        configure(self, text)


def _coerce(md: OptionMetadata, value: OptionValue, key: str) -> Any:
    if value.kind is not md.option_type:
        raise UnknownOrBadTypeError(key, f"expected {md.option_type.value}, got {value.kind.value}")
    raw = value.value
    if md.option_type is OptionType.UINT:
        if isinstance(raw, bool) or not isinstance(raw, int) or not 0 <= raw <= UINT_MAX:
            raise ConversionFailureError(key, f"{raw!r} is not a 64-bit unsigned integer")
        return int(raw)
    if md.option_type is OptionType.FLOAT:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ConversionFailureError(key, f"{raw!r} is not a float")
        return float(raw)
    if md.option_type is OptionType.BOOL:
        if not isinstance(raw, bool):
            raise ConversionFailureError(key, f"{raw!r} is not a boolean")
        return raw
    if not isinstance(raw, str):
        raise ConversionFailureError(key, f"{raw!r} is not a string")
    return raw


def set_option(sampler: ConfigurableSampler, key: str, value: OptionValue) -> None:
    """Resolve *key* on *sampler* and write *value* through its accessor.

    Raises:
        UnknownOrBadTypeError: If the key matches nothing or the kinds differ.
        AmbiguousKeyError: If the key matches several options.
        CannotAccessOptionValueError: If the option has no accessor.
        ConversionFailureError: If the value cannot be narrowed.
    """
    key = key.strip()
    opts = sampler.sampler_options()
    md, idx = opts.find_option_definition(key)
    if idx is None:
        raise CannotAccessOptionValueError(key)

    value = sampler.pre_set_option(md, value)
    accessor = opts[idx][1]
    if accessor is None:
        raise CannotAccessOptionValueError(key)
    accessor.set(_coerce(md, value, key))
    sampler.post_set_option(md)


def get_option(sampler: HasSamplerMetadata, key: str) -> OptionValue:
    """Resolve *key* on *sampler* and read its value.

    Numeric values are widened to the common representation
    (``int`` / ``float``).
    """
    key = key.strip()
    opts = sampler.sampler_options()
    md, idx = opts.find_option_definition(key)
    accessor = opts[idx][1] if idx is not None else None
    if accessor is None:
        raise CannotAccessOptionValueError(key)

    raw = accessor.get()
    if md.option_type is OptionType.UINT:
        if not 0 <= raw <= UINT_MAX:
            raise ConversionFailureError(key, f"{raw!r} does not fit in 64 bits")
        return OptionValue.uint(int(raw))
    if md.option_type is OptionType.FLOAT:
        return OptionValue.real(float(raw))
    if md.option_type is OptionType.BOOL:
        return OptionValue.boolean(bool(raw))
    return OptionValue.string(str(raw))


def configure(sampler: ConfigurableSampler, text: str) -> None:
    """Apply an option string to *sampler*, segment by segment.

    Segments are split on ``:``; each is ``key=value`` or a bare ``value``.
    Fails on the first bad segment; earlier segments stay applied.
    """
    opts = sampler.sampler_options()
    for segment in text.strip().split(":"):
        segment = segment.strip()
        if not segment:
            continue
        key, sep, literal = segment.partition("=")
        if not sep:
            key, literal = "", segment
        md, idx = opts.find_option_definition(key)
        if idx is None:
            raise UnknownOrBadTypeError(md.key)
        sampler.set_option(md.key, parse_value(md.option_type, literal, md.key))
    logger.debug("Configured %s with %r", sampler.sampler_metadata().name, text)
