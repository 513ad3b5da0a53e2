"""
PowerSeriesExpansion — Функция вместе с её рядом в точке

Исполняемый аналог утверждения "f имеет степенной ряд p на шаре
радиуса r вокруг x": связка (function, series, base_point, radius)
и проверки качества локальной аппроксимации

    ‖f(x + d) − S_N(d)‖   для ‖d‖ < r.

Для рядов линейной и билинейной map ошибка равна нулю с точностью
до округления float на любой степени N >= 1 (линейная) / N >= 2
(билинейная).
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np

from mlseries.builders.bilinear import build_bilinear_series, product_domain
from mlseries.builders.linear import build_linear_series
from mlseries.convergence.radius import RadiusConfig, norm_within_radius, radius
from mlseries.core.domain.multilinear_map import ContinuousBilinearMap, ContinuousLinearMap
from mlseries.core.domain.series import FormalMultilinearSeries
from mlseries.core.math.extended_real import ExtendedNonNegReal
from mlseries.core.math.numerical_safeguards import EPS_VECTOR_COMPARE_ABS, validate_non_negative

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class ExpansionCheckResult:
    """Результат проверки аппроксимации на наборе смещений."""

    within_tolerance: bool
    max_error: float
    worst_index: int  # Индекс смещения с максимальной ошибкой (-1 если набор пуст)
    checked: int
    max_degree: int

    # Детали
    details: str


# =============================================================================
# EXPANSION
# =============================================================================


@dataclass(frozen=True, eq=False)
class PowerSeriesExpansion:
    """
    f вместе с рядом p в базовой точке x и радиусом сходимости p.

    function принимает вектор series.domain и возвращает вектор
    series.codomain.
    """

    function: Callable[[np.ndarray], np.ndarray]
    series: FormalMultilinearSeries
    base_point: np.ndarray
    radius: ExtendedNonNegReal

    def __post_init__(self) -> None:
        base = self.series.domain.validate_vector(self.base_point, name="base point").copy()
        base.setflags(write=False)
        object.__setattr__(self, "base_point", base)

    def contains(self, displacement: Any) -> bool:
        """‖d‖ < r"""
        d_norm = self.series.domain.norm(displacement)
        return norm_within_radius(d_norm, self.radius)

    def approximation_error(self, displacement: Any, max_degree: int) -> float:
        """
        ‖f(x + d) − S_N(d)‖ в норме codomain.

        Raises:
            ValueError: Если ‖d‖ >= radius (вне шара сходимости)
            DomainMismatch: Если d не принадлежит domain
        """
        d = self.series.domain.validate_vector(displacement, name="displacement")
        if not self.contains(d):
            raise ValueError(
                f"displacement of norm {self.series.domain.norm(d)} is outside "
                f"the ball of convergence (radius {self.radius})"
            )

        target = self.series.codomain.validate_vector(
            self.function(self.base_point + d), name="function value"
        )
        approx = self.series.partial_sum(d, max_degree)
        return self.series.codomain.norm(target - approx)

    def check_displacements(
        self,
        displacements: Sequence[Any],
        max_degree: int,
        tol: float = EPS_VECTOR_COMPARE_ABS,
    ) -> ExpansionCheckResult:
        """
        Максимальная ошибка аппроксимации по набору смещений.

        Args:
            displacements: Смещения d (все внутри шара сходимости)
            max_degree: Степень усечения N
            tol: Допустимая абсолютная ошибка

        Returns:
            ExpansionCheckResult
        """
        validate_non_negative(tol, "tol")

        max_error = 0.0
        worst_index = -1
        for i, d in enumerate(displacements):
            error = self.approximation_error(d, max_degree)
            if worst_index < 0 or error > max_error:
                max_error = error
                worst_index = i

        within = max_error <= tol
        logger.debug(
            f"Checked {len(displacements)} displacements at N={max_degree}: "
            f"max_error={max_error:.3e} (tol={tol:.1e})"
        )

        return ExpansionCheckResult(
            within_tolerance=within,
            max_error=max_error,
            worst_index=worst_index,
            checked=len(displacements),
            max_degree=max_degree,
            details="PASS" if within else f"max_error {max_error:.3e} exceeds tol {tol:.1e}",
        )


# =============================================================================
# FACTORIES
# =============================================================================


def linear_expansion(
    f: ContinuousLinearMap, x: Any, config: RadiusConfig | None = None
) -> PowerSeriesExpansion:
    """Ряд линейной f в точке x вместе с f и радиусом"""
    series = build_linear_series(f, x)
    return PowerSeriesExpansion(
        function=f,
        series=series,
        base_point=f.domain.validate_vector(x, name="base point"),
        radius=radius(series, config),
    )


def bilinear_expansion(
    f: ContinuousBilinearMap, point: Any, config: RadiusConfig | None = None
) -> PowerSeriesExpansion:
    """
    Ряд билинейной f в точке (x, y) вместе с f и радиусом.

    function принимает вектор произведения E × F.
    """
    series = build_bilinear_series(f, point)
    domain = product_domain(f)
    x, y = point

    def on_product(z: np.ndarray) -> np.ndarray:
        a, b = domain.split(z)
        return f(a, b)

    return PowerSeriesExpansion(
        function=on_product,
        series=series,
        base_point=domain.pair(x, y),
        radius=radius(series, config),
    )
