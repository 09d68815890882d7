"""Tests for SamplerRegistry."""

from __future__ import annotations

import pytest

from llm_samplers.samplers import (
    GreedySampler,
    Mirostat1Sampler,
    SamplerRegistry,
    TopKSampler,
)
from llm_samplers.samplers.base import Sampler


class TestSamplerRegistry:
    """Tests for registration, lookup and construction by name."""

    def test_builtins_registered(self) -> None:
        names = SamplerRegistry.list_registered()
        for name in (
            "flat_bias",
            "freq_presence",
            "greedy",
            "locally_typical",
            "min_p",
            "mirostat1",
            "mirostat2",
            "rand_distrib",
            "repetition",
            "seq_repetition",
            "tail_free",
            "temperature",
            "top_a",
            "top_k",
            "top_p",
        ):
            assert name in names

    def test_get(self) -> None:
        assert SamplerRegistry.get("top_k") is TopKSampler

    def test_unknown_name_lists_available(self) -> None:
        with pytest.raises(KeyError, match="Available"):
            SamplerRegistry.get("nonexistent")

    def test_build_defaults(self) -> None:
        sampler = SamplerRegistry.build("greedy")
        assert isinstance(sampler, GreedySampler)

    def test_build_passes_n_vocab_when_accepted(self) -> None:
        mirostat = SamplerRegistry.build("mirostat1", n_vocab=32000)
        assert isinstance(mirostat, Mirostat1Sampler)
        assert mirostat.n_vocab == 32000
        # Samplers without an n_vocab parameter ignore it.
        assert isinstance(SamplerRegistry.build("top_k", n_vocab=32000), TopKSampler)

    def test_duplicate_registration_rejected(self) -> None:
        with pytest.raises(ValueError, match="already registered"):

            @SamplerRegistry.register("top_k")
            class _Dup(Sampler):
                def sample(self, resources, logits):  # type: ignore[no-untyped-def]
                    return logits
