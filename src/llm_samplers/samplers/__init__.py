"""Sampler base class, registry and built-in samplers.

Importing this package registers every built-in sampler with
:class:`SamplerRegistry`.
"""

from llm_samplers.samplers.base import Sampler, sample_token
from llm_samplers.samplers.registry import SamplerRegistry

# Built-in samplers; imported for registration side effects.
from llm_samplers.samplers.flat_bias import FlatBiasSampler
from llm_samplers.samplers.greedy import GreedySampler
from llm_samplers.samplers.locally_typical import LocallyTypicalSampler
from llm_samplers.samplers.min_p import MinPSampler, TopASampler
from llm_samplers.samplers.mirostat import Mirostat1Sampler, Mirostat2Sampler
from llm_samplers.samplers.rand_distrib import RandDistribSampler
from llm_samplers.samplers.repetition import FreqPresenceSampler, RepetitionSampler
from llm_samplers.samplers.sequence_repetition import SeqRepetitionSampler
from llm_samplers.samplers.tail_free import TailFreeSampler
from llm_samplers.samplers.temperature import TemperatureSampler
from llm_samplers.samplers.top_k import TopKSampler
from llm_samplers.samplers.top_p import TopPSampler

__all__ = [
    "FlatBiasSampler",
    "FreqPresenceSampler",
    "GreedySampler",
    "LocallyTypicalSampler",
    "MinPSampler",
    "Mirostat1Sampler",
    "Mirostat2Sampler",
    "RandDistribSampler",
    "RepetitionSampler",
    "Sampler",
    "SamplerRegistry",
    "SeqRepetitionSampler",
    "TailFreeSampler",
    "TemperatureSampler",
    "TopASampler",
    "TopKSampler",
    "TopPSampler",
    "sample_token",
]
