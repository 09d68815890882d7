"""Option reflection layer for configurable samplers.

The slot-based chain builder lives in :mod:`llm_samplers.configure.build`;
it depends on the chain and is not re-exported here.
"""

from llm_samplers.configure.configurable import (
    ConfigurableSampler,
    HasSamplerMetadata,
    configure,
    get_option,
    set_option,
)
from llm_samplers.configure.metadata import (
    OptionAccessor,
    OptionMetadata,
    SamplerMetadata,
    SamplerOptions,
)
from llm_samplers.configure.value import OptionType, OptionValue, parse_value

__all__ = [
    "ConfigurableSampler",
    "HasSamplerMetadata",
    "OptionAccessor",
    "OptionMetadata",
    "OptionType",
    "OptionValue",
    "SamplerMetadata",
    "SamplerOptions",
    "configure",
    "get_option",
    "parse_value",
    "set_option",
]
