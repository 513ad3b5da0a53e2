"""
Тесты для Radius — радиус сходимости

Проверяет:
1. Финитный носитель → ∞ точно (EXACT), без приближения
2. Геометрический рост cⁿ → 1/c (APPROXIMATE, converged)
3. liminf, а не предел: чередование нулевых и ненулевых членов
4. Степень 0 исключена из формулы
5. Экстремальные ряды: exp (→ ∞) и n! (→ 0) не сходятся в окне; ∞-коэффициенты дают 0
6. term_bounds, is_within_radius и переполнение нормы смещения
7. WARNING для несошедшейся оценки radius()
"""

import logging
import math

import numpy as np
import pytest

from mlseries.convergence.radius import (
    RadiusComputation,
    RadiusConfig,
    RadiusMethod,
    is_within_radius,
    norm_within_radius,
    radius,
    root_reciprocal,
    term_bounds,
)
from mlseries.core.domain.multilinear_map import TensorMultilinearMap, constant_map
from mlseries.core.domain.normed_space import real_space
from mlseries.core.domain.series import FormalMultilinearSeries
from mlseries.core.math.extended_real import INFINITY, ExtendedNonNegReal


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def line():
    return real_space(1)


def geometric(c: float, line) -> FormalMultilinearSeries:
    """Σ cⁿ zⁿ, радиус 1/c"""
    return FormalMultilinearSeries.from_scalar_coefficients(lambda n: c**n, line)


# =============================================================================
# PER-TERM INPUT
# =============================================================================


class TestRootReciprocal:
    """ρₙ = 1/‖p(n)‖^{1/n}"""

    def test_finite_norm(self) -> None:
        assert root_reciprocal(8.0, 3).value == pytest.approx(0.5)

    def test_zero_norm_gives_infinity(self) -> None:
        assert root_reciprocal(0.0, 4).is_infinite

    def test_infinite_norm_gives_zero(self) -> None:
        assert root_reciprocal(math.inf, 2).value == 0.0

    def test_degree_zero_excluded(self) -> None:
        with pytest.raises(ValueError, match=">= 1"):
            root_reciprocal(1.0, 0)


# =============================================================================
# EXACT PATH
# =============================================================================


class TestExactRadius:
    """Ряды с известным нулевым хвостом"""

    def test_zero_series_has_infinite_radius(self) -> None:
        zero = FormalMultilinearSeries.zero(real_space(3), real_space(2))
        result = RadiusComputation().evaluate(zero)

        assert result.radius.is_infinite
        assert result.method == RadiusMethod.EXACT
        assert result.converged
        assert result.error_bound == 0.0

    def test_polynomial_has_infinite_radius(self) -> None:
        plane = real_space(2)
        r1 = real_space(1)
        poly = FormalMultilinearSeries.from_terms(
            plane,
            r1,
            [
                constant_map([1e6], plane, r1),
                TensorMultilinearMap(1, plane, r1, [[1e9, -1e9]]),
                TensorMultilinearMap(2, plane, r1, np.full((1, 2, 2), 1e12)),
            ],
        )
        assert radius(poly).is_infinite

    def test_finite_support_via_vanishing_degree(self, line) -> None:
        p = FormalMultilinearSeries.from_scalar_coefficients(
            lambda n: 10.0**n, line, vanishes_from=20
        )
        result = RadiusComputation().evaluate(p)
        assert result.radius.is_infinite
        assert result.method == RadiusMethod.EXACT

    def test_only_constant_term(self, line) -> None:
        p = FormalMultilinearSeries.from_terms(line, line, [constant_map([5.0], line, line)])
        assert radius(p).is_infinite


# =============================================================================
# APPROXIMATE PATH
# =============================================================================


class TestApproximateRadius:
    """Хвостовые инфимумы по окнам [N/2, N]"""

    @pytest.mark.parametrize("c", [0.5, 2.0, 3.0])
    def test_geometric_growth(self, c: float, line) -> None:
        result = RadiusComputation().evaluate(geometric(c, line))

        assert result.method == RadiusMethod.APPROXIMATE
        assert result.converged
        assert result.radius.value == pytest.approx(1.0 / c, rel=1e-9)
        assert result.error_bound < 1e-9

    def test_liminf_not_limit(self, line) -> None:
        """Чётные члены нулевые (ρ = ∞), нечётные 2ⁿ (ρ = 1/2): liminf = 1/2"""
        p = FormalMultilinearSeries.from_scalar_coefficients(
            lambda n: 2.0**n if n % 2 == 1 else 0.0, line
        )
        assert radius(p).value == pytest.approx(0.5, rel=1e-9)

    def test_degree_zero_term_ignored(self, line) -> None:
        p = FormalMultilinearSeries.from_scalar_coefficients(
            lambda n: 1e300 if n == 0 else 0.5**n, line
        )
        assert radius(p).value == pytest.approx(2.0, rel=1e-9)

    def test_exponential_series_grows_without_converging(self, line) -> None:
        """Σ zⁿ/n!: ρₙ = (n!)^{1/n} → ∞"""
        p = FormalMultilinearSeries.from_scalar_coefficients(
            lambda n: math.exp(-math.lgamma(n + 1)), line
        )
        result = RadiusComputation().evaluate(p)

        assert result.method == RadiusMethod.APPROXIMATE
        assert not result.converged
        assert result.degrees_inspected == 256
        assert result.radius.value > 10.0
        assert "did not converge" in result.details

    def test_factorial_series_tends_to_zero(self, line) -> None:
        """Σ n! zⁿ: ρₙ → 0, с n = 171 норма n! вне диапазона float и ρₙ = 0"""
        p = FormalMultilinearSeries.from_scalar_coefficients(math.factorial, line)
        result = RadiusComputation().evaluate(p)

        assert not result.converged
        assert result.degrees_inspected == 256
        assert p.norm(171) == math.inf
        assert result.radius.value == 0.0
        assert radius(p).value == 0.0

    def test_infinite_coefficients_give_zero_radius(self, line) -> None:
        p = FormalMultilinearSeries.from_scalar_coefficients(
            lambda n: math.inf if n >= 1 else 1.0, line
        )
        assert radius(p).value == 0.0
        assert p.partial_sum([0.0], 5).tolist() == [1.0]
        assert term_bounds(p, 0.0, 3) == [1.0, 0.0, 0.0, 0.0]
        assert not is_within_radius(p, [1e-300])

    def test_norm_upper_bound_gives_lower_bound_radius(self) -> None:
        """Σ|T| >= ‖M‖ ⇒ вычисленный радиус не превышает истинный"""
        plane = real_space(2)
        r1 = real_space(1)

        def factory(n: int):
            # M_n(v₁, …, vₙ) = Π (vᵢ₀ + vᵢ₁): ‖M_n‖ = (√2)ⁿ, Σ|T| = 2ⁿ
            return TensorMultilinearMap(n, plane, r1, np.ones((1,) + (2,) * n))

        p = FormalMultilinearSeries(plane, r1, factory)
        result = RadiusComputation(RadiusConfig(min_degree=4, max_degree=16)).evaluate(p)
        true_radius = 1.0 / math.sqrt(2.0)
        assert result.radius.value == pytest.approx(0.5, rel=1e-9)
        assert result.radius.value <= true_radius

    def test_series_not_modified(self, line) -> None:
        p = geometric(2.0, line)
        first = radius(p)
        second = radius(p)
        assert first == second


# =============================================================================
# CONFIG
# =============================================================================


class TestRadiusConfig:
    """Конфигурация приближённого liminf"""

    def test_defaults(self) -> None:
        config = RadiusConfig()
        assert config.min_degree == 16
        assert config.max_degree == 256
        assert config.rel_tol == 1e-9

    def test_checkpoints(self) -> None:
        assert RadiusConfig(min_degree=16, max_degree=100).checkpoints() == [16, 32, 64, 100]
        assert RadiusConfig(min_degree=16, max_degree=64).checkpoints() == [16, 32, 64]
        assert RadiusConfig(min_degree=16, max_degree=16).checkpoints() == [16]

    def test_max_below_min_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be >= min_degree"):
            RadiusConfig(min_degree=16, max_degree=8)

    def test_min_degree_zero_rejected(self) -> None:
        with pytest.raises(ValueError, match="min_degree must be >= 1"):
            RadiusConfig(min_degree=0)

    def test_negative_tolerance_rejected(self) -> None:
        with pytest.raises(ValueError, match="rel_tol must be non-negative"):
            RadiusConfig(rel_tol=-1e-9)


# =============================================================================
# CONVERGENCE GUARANTEE
# =============================================================================


class TestConvergenceGuarantee:
    """‖d‖ < r → Cauchy; ‖d‖ > r → члены не ограничены"""

    def test_term_bounds_inside_radius_are_summable(self, line) -> None:
        bounds = term_bounds(geometric(2.0, line), 0.25, 40)
        assert bounds[0] == 1.0
        assert bounds[10] == pytest.approx(0.5**10)
        assert sum(bounds) < 2.0

    def test_term_bounds_outside_radius_are_unbounded(self, line) -> None:
        bounds = term_bounds(geometric(2.0, line), 1.0, 60)
        assert bounds[-1] == pytest.approx(2.0**60)

    def test_term_bounds_at_zero(self, line) -> None:
        """0⁰ = 1: остаётся только член степени 0"""
        assert term_bounds(geometric(2.0, line), 0.0, 3) == [1.0, 0.0, 0.0, 0.0]

    def test_term_bounds_overflow_to_infinity(self, line) -> None:
        bounds = term_bounds(geometric(2.0, line), 1e10, 40)
        assert bounds[40] == math.inf

    def test_term_bounds_rejects_negative_r(self, line) -> None:
        with pytest.raises(ValueError, match="r must be non-negative"):
            term_bounds(geometric(2.0, line), -1.0, 3)

    def test_partial_sums_are_cauchy_inside_radius(self, line) -> None:
        p = geometric(2.0, line)
        sums = p.partial_sums([0.25], 80)
        tail_gap = abs(sums[80][0] - sums[60][0])
        assert tail_gap < 1e-15
        assert sums[80][0] == pytest.approx(2.0, rel=1e-12)

    def test_terms_diverge_outside_radius(self, line) -> None:
        p = geometric(2.0, line)
        terms = [abs(p.term(n).apply_diagonal([0.6])[0]) for n in (10, 20, 40)]
        assert terms[0] < terms[1] < terms[2]
        assert terms[2] > 1e3

    def test_is_within_radius(self, line) -> None:
        p = geometric(2.0, line)
        assert is_within_radius(p, [0.4])
        assert is_within_radius(p, [-0.4])
        assert not is_within_radius(p, [0.6])

    def test_everything_is_within_infinite_radius(self) -> None:
        zero = FormalMultilinearSeries.zero(real_space(2), real_space(2))
        assert is_within_radius(zero, [1e300, -1e300])

    def test_overflowing_norm_is_outside_finite_radius(self) -> None:
        plane = real_space(2)
        r1 = real_space(1)
        p = FormalMultilinearSeries(
            plane, r1, lambda n: TensorMultilinearMap(n, plane, r1, np.ones((1,) + (2,) * n))
        )
        config = RadiusConfig(min_degree=4, max_degree=16)
        assert is_within_radius(p, [0.1, 0.1], config)
        assert not is_within_radius(p, [1e300, -1e300], config)

    def test_norm_within_radius(self) -> None:
        assert norm_within_radius(math.inf, INFINITY)
        assert not norm_within_radius(math.inf, ExtendedNonNegReal.finite(1.0))
        assert norm_within_radius(0.5, ExtendedNonNegReal.finite(1.0))
        assert not norm_within_radius(1.0, ExtendedNonNegReal.finite(1.0))
        assert norm_within_radius(1e308, INFINITY)


# =============================================================================
# LOGGING
# =============================================================================


class TestRadiusLogging:
    """radius() сообщает о несошедшейся оценке через WARNING"""

    def test_unconverged_estimate_is_logged(self, line, caplog) -> None:
        p = FormalMultilinearSeries.from_scalar_coefficients(
            lambda n: math.exp(-math.lgamma(n + 1)), line
        )
        with caplog.at_level(logging.WARNING, logger="mlseries.convergence.radius"):
            r = radius(p)

        assert r.value > 10.0
        assert "did not converge" in caplog.text

    def test_converged_estimate_is_not_logged(self, line, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="mlseries.convergence.radius"):
            radius(geometric(2.0, line))

        assert caplog.records == []
