"""
Tests for policy enumeration, softmax and sampling.
"""

import pytest
import numpy as np

from ..agents.efe import EFEResult
from ..agents.policies import (
    calculate_softmax,
    enumerate_policies,
    policy_label,
    sample_index,
    top_policies,
)
from ..core.grid import Action


class TestEnumeratePolicies:
    """Test policy enumeration."""

    def test_count_and_order(self):
        """All 5^3 sequences, starting with all-stay."""
        policies = enumerate_policies(3)
        assert len(policies) == 125
        assert len(set(policies)) == 125
        assert policies[0] == (Action.STAY, Action.STAY, Action.STAY)
        assert policies[-1] == (Action.RIGHT, Action.RIGHT, Action.RIGHT)

    def test_custom_length(self):
        """Policy length is configurable."""
        assert len(enumerate_policies(1)) == 5
        assert len(enumerate_policies(2)) == 25

    def test_invalid_length(self):
        """Zero-length policies are rejected."""
        with pytest.raises(ValueError, match="policy_length"):
            enumerate_policies(0)


class TestSoftmax:
    """Test softmax over negative EFE."""

    def test_infinite_efe_gets_zero(self):
        """softmax([0, inf]) is [1, 0]."""
        np.testing.assert_allclose(calculate_softmax([0.0, np.inf], 3.0), [1.0, 0.0])

    def test_equal_values_uniform(self):
        """Equal EFEs give a uniform distribution."""
        np.testing.assert_allclose(calculate_softmax([2.0, 2.0, 2.0, 2.0], 5.0), np.full(4, 0.25))

    def test_lower_efe_more_probable(self):
        """Lower EFE means higher probability."""
        probs = calculate_softmax([1.0, 0.0, 2.0], 1.0)
        assert probs.sum() == pytest.approx(1.0)
        assert probs[1] > probs[0] > probs[2]

    def test_monotone_in_precision(self):
        """prob of the better policy grows with precision."""
        k = 1.5
        prev = 0.0
        for gamma in [0.1, 0.5, 1.0, 3.0, 10.0]:
            p = calculate_softmax([0.0, k], gamma)[0]
            assert p > prev
            prev = p

    def test_zero_precision_uniform(self):
        """γ = 0 ignores the EFEs."""
        np.testing.assert_allclose(calculate_softmax([0.0, 5.0], 0.0), [0.5, 0.5])

    def test_all_infinite_uniform(self):
        """No finite EFE falls back to uniform."""
        np.testing.assert_allclose(calculate_softmax([np.inf, np.inf], 1.0), [0.5, 0.5])

    def test_large_values_stable(self):
        """Shifting keeps large EFEs from overflowing."""
        probs = calculate_softmax([1000.0, 1001.0], 10.0)
        assert np.all(np.isfinite(probs))
        assert probs[0] > 0.99

    def test_empty(self):
        """Empty input gives an empty distribution."""
        assert calculate_softmax([], 1.0).size == 0


class TestSampling:
    """Test policy sampling."""

    def test_one_hot_always_selected(self, rng):
        """A one-hot distribution always samples its index."""
        probs = np.array([0.0, 0.0, 1.0, 0.0])
        for _ in range(20):
            assert sample_index(probs, [1.0, 1.0, 0.0, 1.0], rng) == 2

    def test_sampling_frequencies(self, rng):
        """Empirical frequencies follow the distribution."""
        probs = np.array([0.7, 0.3])
        draws = [sample_index(probs, [0.0, 1.0], rng) for _ in range(2000)]
        assert np.mean(np.array(draws) == 0) == pytest.approx(0.7, abs=0.05)

    def test_fallthrough_picks_min_efe(self, rng):
        """If the CDF never exceeds the draw, the lowest finite EFE wins."""
        assert sample_index(np.zeros(3), [3.0, 1.0, 2.0], rng) == 1

    def test_fallthrough_without_finite_efe(self, rng):
        """With no finite EFE the fallback is index 0."""
        assert sample_index(np.zeros(3), [np.inf] * 3, rng) == 0

    def test_empty_raises(self, rng):
        """Sampling from nothing is an error."""
        with pytest.raises(ValueError):
            sample_index(np.zeros(0), [], rng)


class TestTopPolicies:
    """Test the ranked policy summary."""

    def test_top_policies(self):
        """Rows are sorted by probability and truncated to n."""
        policies = enumerate_policies(1)
        probs = np.array([0.1, 0.4, 0.05, 0.3, 0.15])
        results = [EFEResult(float(i), float(i), 0.0) for i in range(5)]

        rows = top_policies(policies, probs, results, n=3, selected=3)
        assert [r["index"] for r in rows] == [1, 3, 4]
        assert rows[0]["policy"] == "[up]"
        assert rows[1]["selected"]
        assert not rows[0]["selected"]

    def test_policy_label(self):
        """Labels list the action names."""
        assert policy_label((Action.RIGHT, Action.DOWN, Action.STAY)) == "[right,down,stay]"
