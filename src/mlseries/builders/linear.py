"""
Linear series — Ряд непрерывной линейной map в точке

Для f: E → F и базовой точки x:
- p(0) = константа f(x)
- p(1) = f как multilinear map степени 1
- p(n) = 0 для n >= 2

Разложение точное на любой степени усечения N >= 1:
    S_N(d) = f(x) + f(d) = f(x + d)

Радиус сходимости — ∞ (хвост нулевой начиная со степени 2).
"""

import logging
from typing import Any

from mlseries.core.domain.multilinear_map import ContinuousLinearMap, constant_map
from mlseries.core.domain.series import FormalMultilinearSeries

logger = logging.getLogger(__name__)


def build_linear_series(f: ContinuousLinearMap, x: Any) -> FormalMultilinearSeries:
    """
    Ряд f в точке x.

    Args:
        f: Непрерывная линейная map E → F
        x: Базовая точка в E

    Returns:
        FormalMultilinearSeries над (E, F) с нулевыми членами степени >= 2

    Raises:
        DomainMismatch: Если x не принадлежит f.domain
    """
    x_arr = f.domain.validate_vector(x, name="base point")

    series = FormalMultilinearSeries.from_terms(
        f.domain,
        f.codomain,
        [
            constant_map(f(x_arr), f.domain, f.codomain),
            f.as_multilinear(),
        ],
        name="linear",
    )

    logger.debug(f"Built linear series of {f.domain} → {f.codomain} at x={x_arr}")
    return series
