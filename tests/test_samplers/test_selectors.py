"""Tests for the selecting samplers and the simple logit transforms."""

from __future__ import annotations

import math

import numpy as np
import pytest

from llm_samplers.exceptions import (
    InternalSamplerError,
    MissingResourceError,
    RandomDistributionError,
)
from llm_samplers.logits import Logits
from llm_samplers.resources import NilSamplerResources, SimpleSamplerResources
from llm_samplers.samplers import (
    FlatBiasSampler,
    GreedySampler,
    Mirostat1Sampler,
    Mirostat2Sampler,
    RandDistribSampler,
    TemperatureSampler,
)
from llm_samplers.samplers.rand_distrib import weighted_index

NEG_INF = float("-inf")


def _ln(values: list[float]) -> list[float]:
    return [math.log(v) if v > 0 else NEG_INF for v in values]


class _FixedRng:
    """RNG stand-in returning a fixed uniform value."""

    def __init__(self, u: float) -> None:
        self.u = u

    def random(self) -> float:
        return self.u


class TestGreedy:
    """Tests for GreedySampler."""

    def test_picks_highest(self, ascending_scores: list[float]) -> None:
        assert GreedySampler().sample_token(NilSamplerResources(), Logits(ascending_scores)) == 3

    def test_tie_goes_to_first_in_buffer(self) -> None:
        assert GreedySampler().sample_token(NilSamplerResources(), Logits([1.0, 2.0, 2.0])) == 1

    def test_empty_reports_nothing(self) -> None:
        assert GreedySampler().sample_token(NilSamplerResources(), Logits([])) is None

    def test_leaves_buffer_unchanged(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores)
        GreedySampler().sample(NilSamplerResources(), logits)
        assert logits.token_ids.tolist() == [0, 1, 2, 3]


class TestTemperature:
    """Tests for TemperatureSampler."""

    def test_divides(self) -> None:
        logits = TemperatureSampler(0.5).sample(NilSamplerResources(), Logits([1.0, -2.0]))
        assert logits.logits.tolist() == [2.0, -4.0]

    def test_zero_is_noop(self) -> None:
        logits = TemperatureSampler(0.0).sample(NilSamplerResources(), Logits([1.0, -2.0]))
        assert logits.logits.tolist() == [1.0, -2.0]


class TestFlatBias:
    """Tests for FlatBiasSampler."""

    def test_adds_delta(self) -> None:
        logits = FlatBiasSampler([(1, 0.5)]).sample(NilSamplerResources(), Logits([0.0, 0.0]))
        assert logits.logits.tolist() == [0.0, 0.5]

    def test_first_entry_wins(self) -> None:
        logits = FlatBiasSampler([(0, 1.0), (0, 5.0)]).sample(NilSamplerResources(), Logits([0.0]))
        assert logits.logits.tolist() == [1.0]

    def test_absent_token_ignored(self) -> None:
        logits = FlatBiasSampler([(9, 1.0)]).sample(NilSamplerResources(), Logits([0.0]))
        assert logits.logits.tolist() == [0.0]


class TestWeightedIndex:
    """Tests for the weighted draw helper."""

    @pytest.mark.parametrize(("u", "expected"), [(0.0, 0), (0.49, 0), (0.5, 1), (0.99, 2)])
    def test_cdf_mapping(self, u: float, expected: int) -> None:
        weights = np.array([0.5, 0.25, 0.25])
        assert weighted_index(_FixedRng(u), weights) == expected  # type: ignore[arg-type]

    def test_skips_zero_weights(self) -> None:
        assert weighted_index(_FixedRng(0.0), np.array([0.0, 1.0])) == 1  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "weights",
        [[0.0, 0.0], [-1.0, 2.0], [float("inf"), 1.0], [float("nan"), 1.0], []],
    )
    def test_invalid_weights(self, weights: list[float]) -> None:
        with pytest.raises(RandomDistributionError):
            weighted_index(_FixedRng(0.5), np.array(weights, dtype=np.float64))  # type: ignore[arg-type]


class TestRandDistrib:
    """Tests for RandDistribSampler."""

    def test_requires_rng(self, ascending_scores: list[float]) -> None:
        with pytest.raises(MissingResourceError):
            RandDistribSampler().sample(NilSamplerResources(), Logits(ascending_scores))

    def test_certain_token(self) -> None:
        res = SimpleSamplerResources.seeded(0)
        assert RandDistribSampler().sample_token(res, Logits(_ln([0.0, 1.0, 0.0]))) == 1

    def test_frequencies_follow_probabilities(self) -> None:
        res = SimpleSamplerResources.seeded(1234)
        sampler = RandDistribSampler()
        counts = np.zeros(3)
        for _ in range(4000):
            counts[sampler.sample_token(res, Logits(_ln([0.6, 0.3, 0.1])))] += 1
        assert counts / counts.sum() == pytest.approx([0.6, 0.3, 0.1], abs=0.03)

    def test_empty_reports_nothing(self) -> None:
        assert RandDistribSampler().sample_token(SimpleSamplerResources.seeded(0), Logits([])) is None


class TestMirostat:
    """Tests for Mirostat1Sampler and Mirostat2Sampler."""

    @pytest.mark.parametrize(("probs", "expected"), [([1.0, 0.0, 0.0], 0), ([0.0, 0.0, 1.0], 2)])
    def test_v1_certain_token(self, probs: list[float], expected: int) -> None:
        res = SimpleSamplerResources.seeded(0)
        assert Mirostat1Sampler(n_vocab=3).sample_token(res, Logits(_ln(probs))) == expected

    @pytest.mark.parametrize(("probs", "expected"), [([1.0, 0.0, 0.0], 0), ([0.0, 0.0, 1.0], 2)])
    def test_v2_certain_token(self, probs: list[float], expected: int) -> None:
        res = SimpleSamplerResources.seeded(0)
        assert Mirostat2Sampler().sample_token(res, Logits(_ln(probs))) == expected

    def test_v1_requires_n_vocab(self, ascending_scores: list[float]) -> None:
        with pytest.raises(InternalSamplerError):
            Mirostat1Sampler().sample(SimpleSamplerResources.seeded(0), Logits(ascending_scores))

    def test_v1_m_zero_is_noop(self, ascending_scores: list[float]) -> None:
        sampler = Mirostat1Sampler(n_vocab=4, m=0)
        assert sampler.sample_token(NilSamplerResources(), Logits(ascending_scores)) is None

    @pytest.mark.parametrize("klass", [Mirostat1Sampler, Mirostat2Sampler])
    def test_empty_is_noop(self, klass: type) -> None:
        sampler = klass(n_vocab=4) if klass is Mirostat1Sampler else klass()
        assert sampler.sample_token(NilSamplerResources(), Logits([])) is None

    def test_v2_mu_update(self) -> None:
        """mu_new = mu_old - eta * (-log2(p_selected) - tau)."""
        sampler = Mirostat2Sampler(tau=5.0, eta=0.1, mu=10.0)
        logits = Logits(_ln([0.5, 0.3, 0.2]))
        token = sampler.sample_token(SimpleSamplerResources.seeded(42), logits)
        assert token is not None
        prob = logits[logits.find(token)].prob
        assert sampler.mu == pytest.approx(10.0 - 0.1 * (-math.log2(prob) - 5.0))

    def test_v2_truncates_by_surprise(self) -> None:
        """With mu=1.5 only entries with -log2(p) <= 1.5 survive."""
        sampler = Mirostat2Sampler(mu=1.5)
        logits = Logits(_ln([0.5, 0.3, 0.2]))
        sampler.sample(SimpleSamplerResources.seeded(0), logits)
        assert logits.token_ids.tolist() == [0]
        assert sampler.sampled_token_id() == 0

    def test_v2_keeps_at_least_one(self) -> None:
        sampler = Mirostat2Sampler(mu=0.0)
        logits = Logits(_ln([0.5, 0.3, 0.2]))
        sampler.sample(SimpleSamplerResources.seeded(0), logits)
        assert len(logits) == 1

    def test_v1_mu_update(self) -> None:
        sampler = Mirostat1Sampler(n_vocab=4, tau=5.0, eta=0.1, mu=10.0)
        logits = Logits(_ln([0.4, 0.3, 0.2, 0.1]))
        token = sampler.sample_token(SimpleSamplerResources.seeded(7), logits)
        assert token is not None
        prob = logits[logits.find(token)].prob
        assert sampler.mu == pytest.approx(10.0 - 0.1 * (-math.log2(prob) - 5.0))

    def test_v1_estimate_k_bounds(self) -> None:
        sampler = Mirostat1Sampler(n_vocab=32000)
        probs = np.array([0.4, 0.3, 0.2, 0.1])
        assert 1 <= sampler.estimate_k(probs) <= 4

    def test_default_mu_is_twice_tau(self) -> None:
        assert Mirostat2Sampler(tau=3.0).mu == 6.0
        assert Mirostat1Sampler().mu == 10.0
