"""
Radius — Радиус сходимости формального multilinear ряда

ФОРМУЛА:
    radius(p) = liminf_{n→∞} 1 / ‖p(n)‖^{1/n}

    - Конвенции применяются к каждому члену до liminf: 1/0 = ∞, 1/∞ = 0
    - Степень 0 исключена из формулы (корня степени 0 нет), liminf
      берётся по n >= 1
    - Результат — ExtendedNonNegReal (∞ — настоящий sentinel)

ГАРАНТИЯ:
    ‖d‖ < r  → Σ ‖p(n)‖·‖d‖ⁿ сходится (partial sums — Cauchy)
    ‖d‖ > r  → члены ‖p(n)‖·‖d‖ⁿ не ограничены

ВЫЧИСЛЕНИЕ:
    liminf ρₙ = sup_N inf_{n>=N} ρₙ, где ρₙ = 1/‖p(n)‖^{1/n}

    1. EXACT: если все члены степени >= k нулевые (vanishes_from = k),
       то каждый хвост inf_{n>=N} при N >= max(k, 1) — инфимум множества
       значений ∞, т.е. ровно ∞, и liminf = ∞. Это следствие формулы,
       а не особый случай.
    2. APPROXIMATE: иначе хвостовые инфимумы оцениваются по окнам
       [N/2, N] для N = min_degree, 2·min_degree, … (<= max_degree).
       Вычисление останавливается, когда две последовательные оценки
       совпадают в пределах rel_tol. error_bound — модуль разности двух
       последних оценок.

Если ‖p(n)‖ — верхняя оценка операторной нормы (norm_is_exact=False),
вычисленный радиус — нижняя оценка истинного радиуса, и гарантия
сходимости для ‖d‖ < r сохраняется.
"""

import logging
import math
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Optional

from mlseries.core.domain.series import FormalMultilinearSeries
from mlseries.core.math.extended_real import ExtendedNonNegReal, extended_min
from mlseries.core.math.numerical_safeguards import (
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    validate_degree,
    validate_non_negative,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Первая контрольная степень приближённого liminf
RADIUS_MIN_DEGREE_DEFAULT: Final[int] = 16

# Последняя просматриваемая степень приближённого liminf
RADIUS_MAX_DEGREE_DEFAULT: Final[int] = 256

# Относительная толерантность сходимости оконных оценок liminf
RADIUS_REL_TOL_DEFAULT: Final[float] = EPS_FLOAT_COMPARE_REL

# log(max float): граница переполнения exp в term_bounds
LOG_FLOAT_MAX: Final[float] = math.log(sys.float_info.max)


# =============================================================================
# ENUMS
# =============================================================================


class RadiusMethod(str, Enum):
    """Как получен радиус"""

    EXACT = "exact"
    APPROXIMATE = "approximate"


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class RadiusResult:
    """Результат вычисления радиуса."""

    radius: ExtendedNonNegReal
    method: RadiusMethod

    # Приближённый путь
    converged: bool  # Оконные оценки совпали в пределах rel_tol
    degrees_inspected: int  # Максимальная просмотренная степень (0 для EXACT)
    error_bound: float  # |разность двух последних оценок| (0.0 для EXACT)

    # Детали
    details: str


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class RadiusConfig:
    """Конфигурация приближённого liminf.

    Используется только когда хвост ряда не известен как нулевой.
    """

    min_degree: int = RADIUS_MIN_DEGREE_DEFAULT
    max_degree: int = RADIUS_MAX_DEGREE_DEFAULT
    rel_tol: float = RADIUS_REL_TOL_DEFAULT
    abs_tol: float = EPS_FLOAT_COMPARE_ABS

    def __post_init__(self) -> None:
        validate_degree(self.min_degree, "min_degree", minimum=1)
        validate_degree(self.max_degree, "max_degree", minimum=1)
        if self.max_degree < self.min_degree:
            raise ValueError(
                f"max_degree {self.max_degree} must be >= min_degree {self.min_degree}"
            )
        validate_non_negative(self.rel_tol, "rel_tol")
        validate_non_negative(self.abs_tol, "abs_tol")

    def checkpoints(self) -> list[int]:
        """N = min_degree, 2·min_degree, …; последняя контрольная точка — max_degree"""
        points = []
        n = self.min_degree
        while n < self.max_degree:
            points.append(n)
            n *= 2
        points.append(self.max_degree)
        return points


# =============================================================================
# PER-TERM INPUT
# =============================================================================


def root_reciprocal(norm: float, n: int) -> ExtendedNonNegReal:
    """
    ρₙ = 1 / ‖p(n)‖^{1/n} с extended-real конвенциями.

    ‖p(n)‖ = 0 → ρₙ = ∞ (член не ограничивает радиус)
    ‖p(n)‖ = ∞ → ρₙ = 0 (член форсирует радиус 0)

    Raises:
        ValueError: Если n < 1 или norm отрицательная / NaN
    """
    validate_degree(n, "n", minimum=1)
    return ExtendedNonNegReal.from_float(norm).nth_root(n).reciprocal()


# =============================================================================
# RADIUS COMPUTATION
# =============================================================================


class RadiusComputation:
    """Вычисление радиуса сходимости по нормам членов ряда.

    Чистый read-only запрос: ряд не изменяется, обращения к нормам
    кэшируются самим рядом.
    """

    def __init__(self, config: RadiusConfig | None = None):
        """
        Args:
            config: конфигурация (опционально, используется default)
        """
        self.config = config or RadiusConfig()

    def evaluate(self, p: FormalMultilinearSeries) -> RadiusResult:
        """Радиус сходимости p.

        Args:
            p: формальный multilinear ряд

        Returns:
            RadiusResult с радиусом, методом и оценкой погрешности
        """
        exact_tail = self._known_tail_infimum(p)
        if exact_tail is not None:
            logger.debug(f"Radius of {p!r}: exact {exact_tail}")
            return RadiusResult(
                radius=exact_tail,
                method=RadiusMethod.EXACT,
                converged=True,
                degrees_inspected=0,
                error_bound=0.0,
                details=f"terms vanish from degree {p.vanishes_from}: every tail infimum is ∞",
            )

        return self._approximate(p)

    def _known_tail_infimum(self, p: FormalMultilinearSeries) -> Optional[ExtendedNonNegReal]:
        """inf_{n>=N} ρₙ для хвоста, известного как нулевой.

        Для N >= max(vanishes_from, 1) все ρₙ = 1/0 = ∞, поэтому инфимум
        хвоста и liminf равны ∞. None если хвост не известен.
        """
        if p.vanishes_from is None:
            return None

        start = max(p.vanishes_from, 1)
        # Все члены хвоста: нулевые map'ы с одной и той же нормой 0,
        # поэтому инфимум хвоста равен ρ любого его члена
        return root_reciprocal(p.norm(start), start)

    def _approximate(self, p: FormalMultilinearSeries) -> RadiusResult:
        rho: dict[int, ExtendedNonNegReal] = {}

        def rho_at(n: int) -> ExtendedNonNegReal:
            if n not in rho:
                rho[n] = root_reciprocal(p.norm(n), n)
            return rho[n]

        previous: Optional[ExtendedNonNegReal] = None
        estimate = ExtendedNonNegReal.infinity()
        error_bound = math.inf
        inspected = 0
        converged = False

        for checkpoint in self.config.checkpoints():
            window_start = max(1, checkpoint // 2)
            estimate = extended_min(rho_at(n) for n in range(window_start, checkpoint + 1))
            inspected = checkpoint

            if previous is not None:
                error_bound = _estimate_gap(previous, estimate)
                if estimate.is_close(
                    previous, rel_tol=self.config.rel_tol, abs_tol=self.config.abs_tol
                ):
                    converged = True
                    break
            previous = estimate

        logger.debug(
            f"Radius of {p!r}: approximate {estimate} after {inspected} degrees "
            f"(converged={converged}, error_bound={error_bound})"
        )

        return RadiusResult(
            radius=estimate,
            method=RadiusMethod.APPROXIMATE,
            converged=converged,
            degrees_inspected=inspected,
            error_bound=error_bound,
            details=(
                f"tail infimum over degrees [{max(1, inspected // 2)}, {inspected}]"
                + ("" if converged else "; window estimates did not converge")
            ),
        )


def _estimate_gap(
    previous: ExtendedNonNegReal, current: ExtendedNonNegReal
) -> float:
    if previous.is_infinite and current.is_infinite:
        return 0.0
    if previous.is_infinite or current.is_infinite:
        return math.inf
    return abs(previous.value - current.value)


# =============================================================================
# PUBLIC API
# =============================================================================


def radius(p: FormalMultilinearSeries, config: RadiusConfig | None = None) -> ExtendedNonNegReal:
    """
    Радиус сходимости p как ExtendedNonNegReal.

    Ряд, все члены которого начиная с некоторой степени нулевые,
    имеет радиус ровно ∞ (EXACT), без приближения.

    Для остальных рядов возвращается оконная оценка liminf. Признак
    сходимости оценки (converged) и error_bound доступны только через
    RadiusComputation.evaluate; здесь несошедшаяся оценка лишь
    логируется с уровнем WARNING.
    """
    result = RadiusComputation(config).evaluate(p)
    if not result.converged:
        logger.warning(
            f"Radius of {p!r} did not converge by degree {result.degrees_inspected}: "
            f"returning window estimate {result.radius} (error_bound={result.error_bound})"
        )
    return result.radius


def term_bounds(p: FormalMultilinearSeries, r: float, max_degree: int) -> list[float]:
    """
    Последовательность ‖p(n)‖·rⁿ для n = 0..max_degree.

    При r < radius(p) последовательность ограничена (и суммируема).
    0⁰ = 1: член степени 0 входит как ‖p(0)‖.

    Raises:
        ValueError: Если r отрицательное / NaN / Inf или max_degree < 0
    """
    validate_non_negative(r, "r")
    validate_degree(max_degree, "max_degree")

    bounds = []
    for n in range(max_degree + 1):
        norm = p.norm(n)

        if norm == 0.0 or (r == 0.0 and n > 0):
            bounds.append(0.0)
        elif n == 0 or math.isinf(norm):
            bounds.append(norm)
        else:
            # Через логарифм: rⁿ переполняется раньше произведения
            log_bound = math.log(norm) + n * math.log(r)
            bounds.append(math.exp(log_bound) if log_bound < LOG_FLOAT_MAX else math.inf)
    return bounds


def norm_within_radius(d_norm: float, r: ExtendedNonNegReal) -> bool:
    """
    ‖d‖ < r для нормы конечного вектора.

    Норма конечного вектора может переполнить float (например, ℓ²-норма
    [1e300, -1e300]). Сам вектор конечен, поэтому он лежит в шаре
    радиуса ∞ и вне любого шара конечного радиуса.
    """
    if math.isinf(d_norm):
        return r.is_infinite
    return ExtendedNonNegReal.from_float(d_norm) < r


def is_within_radius(
    p: FormalMultilinearSeries, displacement: Any, config: RadiusConfig | None = None
) -> bool:
    """‖d‖ < radius(p) — смещение внутри шара сходимости"""
    d_norm = p.domain.norm(displacement)
    return norm_within_radius(d_norm, radius(p, config))
