"""Exception hierarchy for llm-samplers.

All exceptions derive from LLMSamplersError, enabling broad catch patterns
at the application boundary while allowing fine-grained handling internally.

Errors fall into three families:
- **Sampling-time** (``SamplerError``): raised while a sampler runs.
- **Configuration-time** (``ConfigureSamplerError``): raised while reading
  or writing sampler options.
- **Building** (``BuildSamplersError``): raised by the slot-based chain
  builder.
"""

from __future__ import annotations


class LLMSamplersError(Exception):
    """Base exception for all llm-samplers errors."""


class ConfigValidationError(LLMSamplersError):
    """Settings validation failed.

    Raised when per-request overrides contain unknown keys or attempt to
    override infrastructure fields.
    """


# --- Sampling-time errors ---


class SamplerError(LLMSamplersError):
    """Base class for errors raised while sampling."""


class InternalSamplerError(SamplerError):
    """An invariant was violated inside a sampler.

    Should not happen for NaN-free input; indicates a bug or corrupted state.
    """


class MissingResourceError(SamplerError):
    """A sampler requested a resource the provider cannot supply."""

    def __init__(self, resource: str) -> None:
        super().__init__(f"missing sampler resource: {resource}")
        self.resource = resource


class InvalidLogitError(SamplerError):
    """A logit value was NaN when constructing a logits buffer."""

    def __init__(self, index: int) -> None:
        super().__init__(f"invalid logit at index {index}")
        self.index = index


class RandomDistributionError(SamplerError):
    """A weighted distribution could not be built or drawn from.

    Raised when the weights are all zero, negative or non-finite.
    """


# --- Configuration-time errors ---


class ConfigureSamplerError(LLMSamplersError):
    """Base class for option access errors.

    Attributes:
        key: The option key (as supplied) that caused the failure.
    """

    _template = "option {key} could not be configured"

    def __init__(self, key: str, detail: str | None = None) -> None:
        message = self._template.format(key=key or "<unspecified>")
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.key = key


class UnknownOrBadTypeError(ConfigureSamplerError):
    """No option matches the key, or the value kind does not match."""

    _template = "unknown option key {key} or bad type"


class AmbiguousKeyError(ConfigureSamplerError):
    """The supplied key is a prefix of more than one option."""

    _template = "option key {key} is ambiguous"


class ConversionFailureError(ConfigureSamplerError):
    """An option value could not be parsed or narrowed to the option's type."""

    _template = "option value conversion for key {key} failed"


class CannotAccessOptionValueError(ConfigureSamplerError):
    """The option is declared but has no accessor bound to it."""

    _template = "cannot access value for option {key}"


# --- Chain builder errors ---


class BuildSamplersError(LLMSamplersError):
    """Base class for chain builder errors."""


class UnknownSlotError(BuildSamplersError):
    """No slot with the given name is registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown slot name {name}")
        self.name = name


class CannotConfigureStaticError(BuildSamplersError):
    """Static slots hold a fixed sampler and cannot be configured."""

    def __init__(self, name: str) -> None:
        super().__init__(f"cannot configure static slot {name}")
        self.name = name


class BuilderConsumedError(BuildSamplersError):
    """The builder already produced its chain and holds no samplers."""

    def __init__(self) -> None:
        super().__init__("builder was already turned into a chain")


class ConfigureFailedError(BuildSamplersError):
    """Configuring the sampler in a slot failed.

    Attributes:
        name: Slot name.
        cause: The underlying configuration error.
    """

    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__(f"configuring sampler {name} failed: {cause}")
        self.name = name
        self.cause = cause
