"""Tests for llm_samplers.logits."""

from __future__ import annotations

import numpy as np
import pytest

from llm_samplers.exceptions import InternalSamplerError, InvalidLogitError
from llm_samplers.logits import Logit, Logits


class TestConstruction:
    """Tests for building a buffer from raw scores."""

    def test_ids_assigned_by_position(self, ascending_scores: list[float]) -> None:
        """Token ids should be 0..N-1 in input order."""
        logits = Logits(ascending_scores)
        assert logits.token_ids.tolist() == [0, 1, 2, 3]
        assert logits.logits.tolist() == ascending_scores
        assert not logits.is_sorted
        assert not logits.has_softmax

    def test_accepts_numpy(self) -> None:
        logits = Logits(np.array([1.0, 2.0], dtype=np.float32))
        assert len(logits) == 2
        assert logits.logits.dtype == np.float64

    def test_nan_reports_first_index(self) -> None:
        """A NaN score should raise InvalidLogitError with its index."""
        with pytest.raises(InvalidLogitError) as exc_info:
            Logits([0.0, 1.0, float("nan"), float("nan")])
        assert exc_info.value.index == 2

    def test_infinities_allowed(self) -> None:
        logits = Logits([float("-inf"), float("inf")])
        assert len(logits) == 2

    def test_empty(self) -> None:
        logits = Logits([])
        assert len(logits) == 0
        assert not logits

    def test_views_are_read_only(self, ascending_scores: list[float]) -> None:
        """Direct writes through the public arrays should be rejected."""
        logits = Logits(ascending_scores)
        with pytest.raises(ValueError):
            logits.logits[0] = 5.0


class TestSorting:
    """Tests for ensure_sorted()."""

    def test_sorts_descending(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).ensure_sorted()
        assert logits.is_sorted
        assert logits.token_ids.tolist() == [3, 2, 1, 0]
        assert np.all(np.diff(logits.logits) <= 0)

    def test_stable_for_ties(self) -> None:
        """Equal logits should keep their original relative order."""
        logits = Logits([1.0, 2.0, 1.0, 2.0]).ensure_sorted()
        assert logits.token_ids.tolist() == [1, 3, 0, 2]

    def test_idempotent(self, sample_logits_large_vocab: np.ndarray) -> None:
        logits = Logits(sample_logits_large_vocab).ensure_sorted()
        first = logits.token_ids.tolist()
        logits.ensure_sorted()
        assert logits.token_ids.tolist() == first

    def test_nan_after_update_is_internal_error(self) -> None:
        logits = Logits([1.0, 2.0])
        logits.update_logits(np.array([float("nan"), 1.0]))
        with pytest.raises(InternalSamplerError):
            logits.ensure_sorted()


class TestSoftmax:
    """Tests for softmax() and ensure_softmax()."""

    def test_probabilities_sum_to_one(self, sample_logits_large_vocab: np.ndarray) -> None:
        logits = Logits(sample_logits_large_vocab).softmax()
        assert logits.has_softmax
        assert np.all(logits.probs >= 0.0)
        assert float(np.sum(logits.probs)) == pytest.approx(1.0)

    def test_matches_reference(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).softmax()
        expected = np.exp(ascending_scores) / np.sum(np.exp(ascending_scores))
        assert logits.probs.tolist() == pytest.approx(sorted(expected, reverse=True))

    def test_large_values_are_stable(self) -> None:
        """Shifting by the maximum should avoid overflow."""
        logits = Logits([1000.0, 999.0]).softmax()
        assert np.all(np.isfinite(logits.probs))
        assert logits.probs[0] > logits.probs[1]

    def test_empty_is_noop(self) -> None:
        logits = Logits([]).softmax()
        assert len(logits) == 0

    def test_negative_infinity_gets_zero(self) -> None:
        logits = Logits([0.0, float("-inf")]).softmax()
        assert logits.probs.tolist() == [1.0, 0.0]

    def test_all_negative_infinity_shares_mass(self) -> None:
        logits = Logits([float("-inf")] * 4).softmax()
        assert logits.probs.tolist() == pytest.approx([0.25] * 4)

    def test_positive_infinity_takes_all_mass(self) -> None:
        logits = Logits([0.0, float("inf"), 1.0]).softmax()
        assert logits[0].token_id == 1
        assert logits[0].prob == 1.0

    def test_idempotent(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).softmax()
        first = logits.probs.copy()
        logits.ensure_softmax()
        assert logits.probs.tolist() == first.tolist()


class TestInvalidation:
    """Mutations should clear the sorted and softmax flags consistently."""

    def test_update_clears_both(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).softmax()
        logits.update_logits(logits.logits * 2.0)
        assert not logits.is_sorted
        assert not logits.has_softmax

    def test_update_length_mismatch(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores)
        with pytest.raises(InternalSamplerError):
            logits.update_logits(np.zeros(2))

    def test_truncate_keeps_sorted_clears_softmax(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).softmax()
        logits.truncate(2)
        assert logits.is_sorted
        assert not logits.has_softmax
        assert logits.token_ids.tolist() == [3, 2]

    def test_truncate_beyond_length_is_noop(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).softmax()
        logits.truncate(10)
        assert len(logits) == 4
        assert logits.has_softmax

    def test_select_partial(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).softmax()
        logits.select(np.array([2, 0]))
        assert logits.token_ids.tolist() == [1, 3]
        assert not logits.is_sorted
        assert not logits.has_softmax

    def test_select_permutation_keeps_softmax(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).softmax()
        logits.select(np.array([3, 2, 1, 0]))
        assert logits.has_softmax
        assert not logits.is_sorted


class TestAccessors:
    """Tests for indexing, iteration, find and copy."""

    def test_getitem_returns_logit(self, ascending_scores: list[float]) -> None:
        entry = Logits(ascending_scores)[1]
        assert isinstance(entry, Logit)
        assert entry.token_id == 1
        assert entry.logit == pytest.approx(0.2)

    def test_iteration(self, ascending_scores: list[float]) -> None:
        ids = [entry.token_id for entry in Logits(ascending_scores).ensure_sorted()]
        assert ids == [3, 2, 1, 0]

    def test_find(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores).ensure_sorted()
        assert logits.find(3) == 0
        assert logits.find(0) == 3
        assert logits.find(99) is None

    def test_copy_is_independent(self, ascending_scores: list[float]) -> None:
        logits = Logits(ascending_scores)
        clone = logits.copy()
        clone.truncate(1)
        assert len(logits) == 4
        assert len(clone) == 1
