"""
Тесты для FormalMultilinearSeries

Проверяет:
1. Тотальность term(n): явный нулевой map за пределами данных
2. Ленивость и мемоизацию фабрики членов
3. Partial sums (член степени 0 включён)
4. Алгебру рядов (+, -, neg, scalar) и DomainMismatch
5. Нулевой ряд: partial sum тождественно ноль
"""

import numpy as np
import pytest

from mlseries.core.domain.multilinear_map import (
    ScalarMonomialMap,
    TensorMultilinearMap,
    ZeroMultilinearMap,
    constant_map,
    zero_map,
)
from mlseries.core.domain.normed_space import DomainMismatch, real_space
from mlseries.core.domain.series import FormalMultilinearSeries, evaluate_partial_sum


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def line():
    return real_space(1)


@pytest.fixture
def geometric(line) -> FormalMultilinearSeries:
    """Σ zⁿ"""
    return FormalMultilinearSeries.from_scalar_coefficients(lambda n: 1.0, line, name="geometric")


@pytest.fixture
def plane():
    return real_space(2)


@pytest.fixture
def quadratic_series(plane) -> FormalMultilinearSeries:
    """1 + (d₀ + d₁) + d₀d₁ на ℝ² → ℝ¹"""
    r1 = real_space(1)
    return FormalMultilinearSeries.from_terms(
        plane,
        r1,
        [
            constant_map([1.0], plane, r1),
            TensorMultilinearMap(1, plane, r1, [[1.0, 1.0]]),
            TensorMultilinearMap(2, plane, r1, [[[0.0, 1.0], [0.0, 0.0]]]),
        ],
    )


# =============================================================================
# TERMS
# =============================================================================


class TestTerms:
    """Тотальность и ленивость term(n)"""

    def test_terms_beyond_prefix_are_explicit_zero_maps(
        self, quadratic_series: FormalMultilinearSeries
    ) -> None:
        for n in range(3, 12):
            term = quadratic_series.term(n)
            assert isinstance(term, ZeroMultilinearMap)
            assert term.degree == n
            assert term.domain == quadratic_series.domain
            assert term.codomain == quadratic_series.codomain

    def test_vanishes_from(self, quadratic_series: FormalMultilinearSeries) -> None:
        assert quadratic_series.vanishes_from == 3

    def test_getitem(self, quadratic_series: FormalMultilinearSeries) -> None:
        assert quadratic_series[1] is quadratic_series.term(1)

    def test_negative_degree_raises(self, quadratic_series: FormalMultilinearSeries) -> None:
        with pytest.raises(ValueError, match=">= 0"):
            quadratic_series.term(-1)

    def test_factory_is_lazy_and_memoized(self, line) -> None:
        calls = []

        def factory(n):
            calls.append(n)
            return ScalarMonomialMap(n, line, line, 2.0**n)

        series = FormalMultilinearSeries(line, line, factory)
        assert calls == []

        first = series.term(4)
        second = series.term(4)
        assert first is second
        assert calls == [4]

    def test_factory_not_called_past_vanishing_degree(self, line) -> None:
        calls = []

        def factory(n):
            calls.append(n)
            return ScalarMonomialMap(n, line, line, 1.0)

        series = FormalMultilinearSeries(line, line, factory, vanishes_from=2)
        assert series.term(5).is_zero()
        assert calls == []

    def test_wrong_degree_from_factory_raises(self, line) -> None:
        series = FormalMultilinearSeries(line, line, lambda n: zero_map(n + 1, line, line))
        with pytest.raises(DomainMismatch, match="term 2 has degree 3"):
            series.term(2)

    def test_wrong_space_from_factory_raises(self, line, plane) -> None:
        series = FormalMultilinearSeries(line, line, lambda n: zero_map(n, plane, line))
        with pytest.raises(DomainMismatch, match="domain"):
            series.term(0)

    def test_from_terms_checks_eagerly(self, line) -> None:
        with pytest.raises(DomainMismatch, match="term 1 has degree 2"):
            FormalMultilinearSeries.from_terms(
                line, line, [zero_map(0, line, line), zero_map(2, line, line)]
            )

    def test_norms(self, geometric: FormalMultilinearSeries) -> None:
        assert geometric.norm(7) == 1.0
        assert geometric.norm(7) == geometric.term(7).opnorm()

    def test_terms_prefix(self, quadratic_series: FormalMultilinearSeries) -> None:
        terms = quadratic_series.terms(4)
        assert [t.degree for t in terms] == [0, 1, 2, 3, 4]

    def test_scalar_series_requires_line(self, plane) -> None:
        with pytest.raises(DomainMismatch, match="one-dimensional"):
            FormalMultilinearSeries.from_scalar_coefficients(lambda n: 1.0, plane)

    def test_series_between_fields_rejected(self, line) -> None:
        from mlseries.core.domain.normed_space import complex_space

        with pytest.raises(DomainMismatch, match="different fields"):
            FormalMultilinearSeries(line, complex_space(1), lambda n: None)


# =============================================================================
# PARTIAL SUMS
# =============================================================================


class TestPartialSums:
    """Partial sums Σ_{n=0..N} p(n)(d, …, d)"""

    def test_degree_zero_term_included(self, quadratic_series: FormalMultilinearSeries) -> None:
        assert quadratic_series.partial_sum([5.0, 7.0], 0).tolist() == [1.0]

    def test_polynomial_partial_sums(self, quadratic_series: FormalMultilinearSeries) -> None:
        d = [2.0, 3.0]
        assert quadratic_series.partial_sum(d, 1).tolist() == [6.0]
        assert quadratic_series.partial_sum(d, 2).tolist() == [12.0]
        assert quadratic_series.partial_sum(d, 10).tolist() == [12.0]

    def test_geometric_partial_sum(self, geometric: FormalMultilinearSeries) -> None:
        n = 10
        expected = (1 - 0.5 ** (n + 1)) / (1 - 0.5)
        assert geometric.partial_sum([0.5], n)[0] == pytest.approx(expected)

    def test_evaluate_partial_sum_matches_method(self, geometric: FormalMultilinearSeries) -> None:
        assert evaluate_partial_sum(geometric, [0.25], 8).tolist() == geometric.partial_sum(
            [0.25], 8
        ).tolist()

    def test_partial_sums_sequence(self, geometric: FormalMultilinearSeries) -> None:
        sums = geometric.partial_sums([0.5], 5)
        assert len(sums) == 6
        assert sums[0].tolist() == [1.0]
        assert sums[-1].tolist() == pytest.approx(geometric.partial_sum([0.5], 5).tolist())
        # Cauchy: приращения убывают геометрически
        increments = [abs(sums[k + 1][0] - sums[k][0]) for k in range(5)]
        assert all(b < a for a, b in zip(increments, increments[1:]))

    def test_zero_series_is_identically_zero(self, plane) -> None:
        zero = FormalMultilinearSeries.zero(plane, plane)
        rng = np.random.default_rng(3)
        for _ in range(5):
            d = rng.normal(size=2) * 10
            for n in (0, 1, 4, 20):
                assert not np.any(zero.partial_sum(d, n))
                assert all(not np.any(s) for s in zero.partial_sums(d, n))

    def test_negative_max_degree_raises(self, geometric: FormalMultilinearSeries) -> None:
        with pytest.raises(ValueError, match="max_degree"):
            geometric.partial_sum([0.5], -1)

    def test_wrong_displacement_raises(self, geometric: FormalMultilinearSeries) -> None:
        with pytest.raises(DomainMismatch, match="displacement"):
            geometric.partial_sum([0.5, 0.5], 3)


# =============================================================================
# SERIES ALGEBRA
# =============================================================================


class TestSeriesAlgebra:
    """Алгебра формальных рядов"""

    def test_sum_is_termwise(self, geometric: FormalMultilinearSeries, line) -> None:
        alternating = FormalMultilinearSeries.from_scalar_coefficients(
            lambda n: (-1.0) ** n, line
        )
        total = geometric + alternating
        for n in range(6):
            expected = 2.0 if n % 2 == 0 else 0.0
            assert total.term(n).apply_diagonal([1.0])[0] == pytest.approx(expected)

    def test_difference_with_itself_is_zero(self, quadratic_series: FormalMultilinearSeries) -> None:
        diff = quadratic_series - quadratic_series
        assert diff.vanishes_from == 3
        assert not np.any(diff.partial_sum([1.5, -2.0], 5))

    def test_negation(self, quadratic_series: FormalMultilinearSeries) -> None:
        d = [2.0, 3.0]
        assert (-quadratic_series).partial_sum(d, 2).tolist() == [-12.0]

    def test_scalar_multiple(self, quadratic_series: FormalMultilinearSeries) -> None:
        d = [2.0, 3.0]
        assert (2 * quadratic_series).partial_sum(d, 2).tolist() == [24.0]
        assert (quadratic_series * 0.5).partial_sum(d, 2).tolist() == [6.0]

    def test_vanishing_is_lost_with_unbounded_operand(self, geometric: FormalMultilinearSeries, line) -> None:
        finite = FormalMultilinearSeries.from_terms(line, line, [constant_map([1.0], line, line)])
        assert (geometric + finite).vanishes_from is None
        assert (finite + finite).vanishes_from == 1

    def test_mismatched_spaces_raise(self, geometric: FormalMultilinearSeries, plane) -> None:
        other = FormalMultilinearSeries.zero(plane, plane)
        with pytest.raises(DomainMismatch, match="series add"):
            geometric + other

    def test_complex_scalar_on_real_series_raises(self, geometric: FormalMultilinearSeries) -> None:
        with pytest.raises(DomainMismatch, match="complex scalar"):
            geometric * 1j
