"""Tests for llm_samplers.chain."""

from __future__ import annotations

import pytest

from llm_samplers.chain import SamplerChain
from llm_samplers.exceptions import MissingResourceError
from llm_samplers.logits import Logits
from llm_samplers.resources import NilSamplerResources
from llm_samplers.samplers import (
    FlatBiasSampler,
    GreedySampler,
    RandDistribSampler,
    TopKSampler,
)
from llm_samplers.samplers.base import Sampler

NEG_INF = float("-inf")


class _RecordingSampler(Sampler):
    """Test double that records calls and reports a fixed token."""

    def __init__(self, token: int | None, calls: list[str], name: str) -> None:
        self.token = token
        self.calls = calls
        self.name = name

    def sample(self, resources, logits):  # type: ignore[no-untyped-def]
        self.calls.append(self.name)
        return logits

    def sampled_token_id(self) -> int | None:
        return self.token


class TestSamplerChain:
    """Tests for SamplerChain."""

    def test_bias_then_greedy(self, ascending_scores: list[float]) -> None:
        """Banning tokens 3 and 2 should leave greedy picking token 1."""
        chain = (
            SamplerChain()
            + FlatBiasSampler([(3, NEG_INF)])
            + FlatBiasSampler([(2, NEG_INF)])
            + GreedySampler()
        )
        token = chain.sample_token(NilSamplerResources(), Logits(ascending_scores))
        assert token == 1

    def test_add_leaves_operand_unchanged(self) -> None:
        base = SamplerChain([TopKSampler(2)])
        extended = base + GreedySampler()
        assert extended is not base
        assert len(base) == 1
        assert [type(s).__name__ for s in extended] == ["TopKSampler", "GreedySampler"]

    def test_iadd_and_push(self) -> None:
        chain = SamplerChain()
        chain += TopKSampler(2)
        result = chain.push_sampler(GreedySampler())
        assert result is chain
        assert len(chain) == 2
        assert [type(s).__name__ for s in chain] == ["TopKSampler", "GreedySampler"]

    def test_stages_run_in_order(self) -> None:
        calls: list[str] = []
        chain = SamplerChain(
            [_RecordingSampler(None, calls, "a"), _RecordingSampler(None, calls, "b")]
        )
        chain.sample(NilSamplerResources(), Logits([0.0]))
        assert calls == ["a", "b"]

    def test_later_report_wins(self) -> None:
        calls: list[str] = []
        chain = SamplerChain(
            [_RecordingSampler(1, calls, "a"), _RecordingSampler(2, calls, "b")]
        )
        assert chain.sample_token(NilSamplerResources(), Logits([0.0])) == 2

    def test_empty_report_does_not_override(self) -> None:
        calls: list[str] = []
        chain = SamplerChain(
            [_RecordingSampler(1, calls, "a"), _RecordingSampler(None, calls, "b")]
        )
        assert chain.sample_token(NilSamplerResources(), Logits([0.0])) == 1

    def test_token_reset_each_call(self, ascending_scores: list[float]) -> None:
        chain = SamplerChain([GreedySampler()])
        assert chain.sample_token(NilSamplerResources(), Logits(ascending_scores)) == 3
        assert chain.sample_token(NilSamplerResources(), Logits([])) is None

    def test_failure_stops_chain(self, ascending_scores: list[float]) -> None:
        """A failing stage should propagate and skip later stages."""
        calls: list[str] = []
        chain = SamplerChain([RandDistribSampler(), _RecordingSampler(5, calls, "after")])
        with pytest.raises(MissingResourceError):
            chain.sample(NilSamplerResources(), Logits(ascending_scores))
        assert calls == []

    def test_nested_chain(self, ascending_scores: list[float]) -> None:
        inner = SamplerChain([FlatBiasSampler([(3, NEG_INF)])])
        outer = SamplerChain([inner, GreedySampler()])
        assert outer.sample_token(NilSamplerResources(), Logits(ascending_scores)) == 2
