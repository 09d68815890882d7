"""Diagnostic logging subsystem for llm-samplers.

Provides immutable per-token sampling records and a configurable logger
that supports none/summary/full verbosity and in-memory diagnostic mode.
"""

from llm_samplers.logging.logger import SamplingLogger
from llm_samplers.logging.types import TokenSamplingRecord

__all__ = [
    "SamplingLogger",
    "TokenSamplingRecord",
]
