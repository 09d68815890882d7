"""Configuration system for llm-samplers.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (LLMS_*) -> .env file -> field defaults.

Each standard slot of the chain has one option string field using the
sampler option grammar (``"key=value:key=value"``). An empty string leaves
the slot unpopulated.

Per-request overrides are applied via resolve_settings() which creates a new
settings instance without mutating the defaults. Infrastructure fields are
protected from per-request override.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from llm_samplers.configure.build import SamplerChainBuilder, SamplerSlot
from llm_samplers.exceptions import (
    ConfigValidationError,
    ConfigureFailedError,
    ConfigureSamplerError,
)
from llm_samplers.samplers.registry import SamplerRegistry

# Fields that can be overridden per-request. Infrastructure fields
# (history size, diagnostic mode) are excluded.
_PER_REQUEST_FIELDS: frozenset[str] = frozenset(
    {
        "seed",
        "repetition",
        "freq_presence",
        "seq_repetition",
        "temperature",
        "top_k",
        "tail_free",
        "locally_typical",
        "top_p",
        "min_p",
        "top_a",
        "selector",
        "selector_options",
        "log_level",
    }
)

# Standard slot layout: (settings field, registered sampler name, slot kind).
# Penalties first, then temperature, then filters; the selector comes last.
STANDARD_SLOTS: tuple[tuple[str, str, str], ...] = (
    ("repetition", "repetition", "chain"),
    ("freq_presence", "freq_presence", "chain"),
    ("seq_repetition", "seq_repetition", "chain"),
    ("temperature", "temperature", "single"),
    ("top_k", "top_k", "single"),
    ("tail_free", "tail_free", "single"),
    ("locally_typical", "locally_typical", "single"),
    ("top_p", "top_p", "single"),
    ("min_p", "min_p", "single"),
    ("top_a", "top_a", "single"),
)

SELECTORS: frozenset[str] = frozenset({"greedy", "rand_distrib", "mirostat1", "mirostat2"})

_PREFIX = "llms_"

# All known field names (populated after class definition).
_ALL_FIELDS: frozenset[str] = frozenset()


class SamplerSettings(BaseSettings):
    """Settings for a sampling session.

    Resolution order: init kwargs -> env vars (LLMS_*) -> .env file -> defaults.

    Fields are divided into two groups:
    - **Infrastructure**: history size and diagnostic mode, NOT overridable
      per-request.
    - **Sampling parameters**: seed, slot option strings, selector and
      logging level, overridable per-request with the ``llms_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="LLMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Infrastructure (NOT per-request overridable) ---

    history_size: int = Field(
        default=1024,
        ge=0,
        description="Number of trailing generated tokens a session keeps",
    )
    diagnostic_mode: bool = Field(
        default=False,
        description="Store all token records in memory for analysis",
    )

    # --- Randomness ---

    seed: int | None = Field(
        default=None,
        description="Seed for the session RNG (None = fresh OS entropy)",
    )

    # --- Slot option strings (empty = slot unpopulated) ---

    repetition: str = Field(default="", description="Repetition penalty options, e.g. 'penalty=1.1:last_n=64'")
    freq_presence: str = Field(default="", description="Frequency/presence penalty options")
    seq_repetition: str = Field(default="", description="Sequence repetition penalty options")
    temperature: str = Field(default="", description="Temperature, e.g. '0.8'")
    top_k: str = Field(default="", description="Top-k options, e.g. 'k=40'")
    tail_free: str = Field(default="", description="Tail-free options, e.g. 'z=0.95'")
    locally_typical: str = Field(default="", description="Locally typical options, e.g. 'p=0.9'")
    top_p: str = Field(default="", description="Top-p options, e.g. 'p=0.9'")
    min_p: str = Field(default="", description="Min-p options, e.g. 'p=0.05'")
    top_a: str = Field(default="", description="Top-a options, e.g. 'a1=0.2:a2=2'")

    # --- Selection ---

    selector: str = Field(
        default="rand_distrib",
        description="Terminal selector: 'greedy', 'rand_distrib', 'mirostat1', 'mirostat2'",
    )
    selector_options: str = Field(
        default="",
        description="Options for the selector, e.g. 'tau=5:eta=0.1'",
    )

    # --- Logging ---

    log_level: str = Field(
        default="none",
        description="Logging verbosity: 'none', 'summary', 'full'",
    )


# Populate _ALL_FIELDS now that the class is defined.
_ALL_FIELDS = frozenset(SamplerSettings.model_fields.keys())


def _strip_prefix(key: str) -> str:
    """Strip the 'llms_' prefix from an override key."""
    if key.startswith(_PREFIX):
        return key[len(_PREFIX) :]
    return key


def validate_overrides(overrides: dict[str, Any]) -> None:
    """Validate all llms_* keys in *overrides* without creating settings.

    Args:
        overrides: Per-request overrides, potentially with the llms_ prefix.

    Raises:
        ConfigValidationError: If any llms_* key is unknown or non-overridable.
    """
    for key in overrides:
        if not key.startswith(_PREFIX):
            continue
        field_name = _strip_prefix(key)
        if field_name not in _ALL_FIELDS:
            raise ConfigValidationError(
                f"Unknown settings field: '{key}' (no field '{field_name}' exists)"
            )
        if field_name not in _PER_REQUEST_FIELDS:
            raise ConfigValidationError(
                f"Field '{field_name}' is an infrastructure field and cannot be "
                f"overridden per-request"
            )


def resolve_settings(
    defaults: SamplerSettings,
    overrides: dict[str, Any] | None,
) -> SamplerSettings:
    """Create a new settings instance merging defaults with per-request overrides.

    Override keys use the 'llms_' prefix (e.g., 'llms_top_k': 'k=20'). Keys
    without the prefix are ignored (they belong to other components).

    Args:
        defaults: The base settings loaded from environment.
        overrides: Per-request overrides.

    Returns:
        A new SamplerSettings with overrides applied, or *defaults* itself
        when there is nothing to apply.

    Raises:
        ConfigValidationError: If any llms_* key is unknown or non-overridable.
    """
    if not overrides:
        return defaults

    validate_overrides(overrides)

    updates: dict[str, Any] = {}
    for key, value in overrides.items():
        if not key.startswith(_PREFIX):
            continue
        updates[_strip_prefix(key)] = value

    if not updates:
        return defaults

    # model_validate runs full validation; model_copy(update=...) would not.
    merged = defaults.model_dump()
    merged.update(updates)
    return SamplerSettings.model_validate(merged)


def _factory(name: str, n_vocab: int | None) -> Any:
    return lambda: SamplerRegistry.build(name, n_vocab=n_vocab)


def build_chain_builder(settings: SamplerSettings, n_vocab: int | None = None) -> SamplerChainBuilder:
    """Build the standard slot layout and apply the settings' option strings.

    Args:
        settings: Settings providing option strings and the selector.
        n_vocab: Vocabulary size, passed to samplers that need it
            (Mirostat v1).

    Returns:
        A builder whose ``into_chain()`` yields the configured chain.

    Raises:
        ConfigValidationError: If the selector name is unknown.
        ConfigureFailedError: If an option string, including the selector
            options, is rejected.
    """
    if settings.selector not in SELECTORS:
        raise ConfigValidationError(
            f"Unknown selector '{settings.selector}'. Available: {', '.join(sorted(SELECTORS))}"
        )

    builder = SamplerChainBuilder()
    for field_name, sampler_name, kind in STANDARD_SLOTS:
        factory = _factory(sampler_name, n_vocab)
        slot = SamplerSlot.chain(factory) if kind == "chain" else SamplerSlot.single(factory)
        builder.push_slot(field_name, slot)
        text = getattr(settings, field_name)
        if text.strip():
            builder.configure(field_name, text)

    selector_slot = SamplerSlot.static(_factory(settings.selector, n_vocab))
    if settings.selector_options.strip():
        (selector,) = selector_slot.samplers
        try:
            selector.configure(settings.selector_options)  # type: ignore[attr-defined]
        except ConfigureSamplerError as err:
            raise ConfigureFailedError("selector", err) from err
    builder.push_slot("selector", selector_slot)
    return builder
