"""Unit tests for p-value estimation (legacy approximation and exact)."""

import math

import pytest

from foodtrigger.services.correlation.significance import (
    approximate_incomplete_beta,
    approximate_t_cdf,
    estimate_p_value,
    t_statistic,
)
from foodtrigger.services.correlation.types import PValueMethod


class TestTStatistic:
    def test_zero_rho(self):
        assert t_statistic(0.0, 10) == 0.0

    def test_known_value(self):
        # 0.5 * sqrt(10 / 0.75)
        assert t_statistic(0.5, 12) == pytest.approx(1.825741858)

    def test_perfect_correlation_is_infinite(self):
        assert t_statistic(1.0, 10) == math.inf
        assert t_statistic(-1.0, 10) == -math.inf


class TestApproximation:
    def test_incomplete_beta_edges(self):
        assert approximate_incomplete_beta(0.0, 2, 0.5) == 0.0
        assert approximate_incomplete_beta(1.0, 2, 0.5) == 1.0

    def test_incomplete_beta_formula(self):
        assert approximate_incomplete_beta(0.75, 5, 0.5) == pytest.approx(
            0.75**5 * 0.5
        )

    def test_t_cdf_at_zero_is_half(self):
        assert approximate_t_cdf(0.0, 10) == pytest.approx(0.5)

    def test_t_cdf_at_infinity_is_one(self):
        assert approximate_t_cdf(math.inf, 10) == 1.0


class TestEstimatePValue:
    """Tests for estimate_p_value."""

    @pytest.mark.parametrize("n", [0, 1, 2])
    @pytest.mark.parametrize("method", list(PValueMethod))
    def test_fewer_than_three_samples_is_one(self, n, method):
        assert estimate_p_value(0.9, n, method) == 1.0

    @pytest.mark.parametrize("method", list(PValueMethod))
    def test_zero_correlation_is_one(self, method):
        assert estimate_p_value(0.0, 30, method) == pytest.approx(1.0)

    @pytest.mark.parametrize("method", list(PValueMethod))
    @pytest.mark.parametrize("rho", [1.0, -1.0])
    def test_perfect_correlation_is_zero(self, method, rho):
        assert estimate_p_value(rho, 12, method) == 0.0

    def test_approximate_matches_legacy_formula(self):
        # x = df / (df + t^2) = 0.75, p = x^(df/2) * (1 - x)^0.5
        assert estimate_p_value(0.5, 12) == pytest.approx(0.75**5 * 0.5)

    def test_approximate_is_default(self):
        assert estimate_p_value(0.5, 12) == estimate_p_value(
            0.5, 12, PValueMethod.APPROXIMATE
        )

    def test_exact_uses_student_t(self):
        # t = 1.826 on 10 df sits just past the two-tailed 10% critical value 1.812
        p_value = estimate_p_value(0.5, 12, PValueMethod.EXACT)
        assert 0.09 < p_value < 0.10

    def test_exact_decreases_with_strength(self):
        values = [
            estimate_p_value(rho, 20, PValueMethod.EXACT)
            for rho in (0.1, 0.3, 0.5, 0.7, 0.9)
        ]
        assert values == sorted(values, reverse=True)

    def test_sign_does_not_matter(self):
        for method in PValueMethod:
            assert estimate_p_value(0.4, 15, method) == pytest.approx(
                estimate_p_value(-0.4, 15, method)
            )

    @pytest.mark.parametrize("method", list(PValueMethod))
    def test_always_within_unit_interval(self, method):
        for n in (3, 5, 10, 50, 500):
            for step in range(-10, 11):
                p_value = estimate_p_value(step / 10, n, method)
                assert 0.0 <= p_value <= 1.0
