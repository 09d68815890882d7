"""llm-samplers: composable token samplers for language model generation.

Turns a vector of per-token scores into one selected token by running it
through a chain of filters, penalizers and a terminal selector. Samplers
are configured from plain option strings, assembled through a slot-based
builder and driven per token by a ``SamplingSession``.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("llm-samplers")
except PackageNotFoundError:
    __version__ = "0.0.0"

from llm_samplers.chain import SamplerChain
from llm_samplers.config import (
    SamplerSettings,
    build_chain_builder,
    resolve_settings,
    validate_overrides,
)
from llm_samplers.configure.build import SamplerChainBuilder, SamplerSlot
from llm_samplers.exceptions import (
    BuildSamplersError,
    ConfigureSamplerError,
    ConfigValidationError,
    LLMSamplersError,
    SamplerError,
)
from llm_samplers.logits import Logit, Logits
from llm_samplers.resources import (
    LockedSamplerResources,
    NilSamplerResources,
    SamplerResources,
    SimpleSamplerResources,
)
from llm_samplers.samplers import Sampler, SamplerRegistry
from llm_samplers.session import SamplingSession

__all__ = [
    "BuildSamplersError",
    "ConfigValidationError",
    "ConfigureSamplerError",
    "LLMSamplersError",
    "LockedSamplerResources",
    "Logit",
    "Logits",
    "NilSamplerResources",
    "Sampler",
    "SamplerChain",
    "SamplerChainBuilder",
    "SamplerError",
    "SamplerRegistry",
    "SamplerResources",
    "SamplerSettings",
    "SamplerSlot",
    "SamplingSession",
    "SimpleSamplerResources",
    "__version__",
    "build_chain_builder",
    "resolve_settings",
    "validate_overrides",
]
