"""
Bilinear series — Ряд непрерывной билинейной map в точке

Для f: E × F → G и базовой точки (x, y) ряд над (E × F, G):
- p(0) = константа f(x, y)
- p(1) = производная Фреше: (dx, dy) ↦ f(x, dy) + f(dx, y)
- p(2) = uncurry f: ((a, b), (a', b')) ↦ f(a, b')
- p(n) = 0 для n >= 3

Разложение точное на любой степени усечения N >= 2:
    f(x + dx, y + dy) = f(x, y) + f(x, dy) + f(dx, y) + f(dx, dy)

Перекрёстный член f(dx, dy) целиком даёт p(2), остатка нет.
Радиус сходимости — ∞ (хвост нулевой начиная со степени 3).
"""

import logging
from typing import Any

import numpy as np

from mlseries.core.domain.multilinear_map import (
    ContinuousBilinearMap,
    TensorMultilinearMap,
    constant_map,
)
from mlseries.core.domain.normed_space import DomainMismatch, ProductSpace
from mlseries.core.domain.series import FormalMultilinearSeries

logger = logging.getLogger(__name__)


def product_domain(f: ContinuousBilinearMap) -> ProductSpace:
    """E × F для f: E × F → G"""
    return ProductSpace.of(f.first, f.second)


def uncurry_bilinear(f: ContinuousBilinearMap) -> TensorMultilinearMap:
    """
    Билинейная f → multilinear map степени 2 на E × F.

    ((a, b), (a', b')) ↦ f(a, b'): первый аргумент f берётся из первой
    пары, второй — из второй пары. На диагонали ((dx, dy), (dx, dy))
    даёт f(dx, dy).

    Тензор T формы (G, E+F, E+F) имеет единственный ненулевой блок
    T[:, :E, E:] = тензор f.
    """
    domain = product_domain(f)
    dim_e = f.first.dim

    tensor = np.zeros(
        (f.codomain.dim, domain.dim, domain.dim), dtype=f.codomain.field.dtype
    )
    tensor[:, :dim_e, dim_e:] = f.tensor

    return TensorMultilinearMap(2, domain, f.codomain, tensor)


def bilinear_derivative(f: ContinuousBilinearMap, x: Any, y: Any) -> TensorMultilinearMap:
    """
    Производная f в (x, y) как multilinear map степени 1 на E × F.

    (dx, dy) ↦ f(dx, y) + f(x, dy): матрица [f(·, y) | f(x, ·)].

    Raises:
        DomainMismatch: Если x ∉ E или y ∉ F
    """
    domain = product_domain(f)
    matrix = np.hstack([f.fix_second(y).matrix, f.fix_first(x).matrix])
    return TensorMultilinearMap(1, domain, f.codomain, matrix)


def _split_point(point: Any) -> tuple[Any, Any]:
    try:
        x, y = point
    except (TypeError, ValueError):
        raise DomainMismatch(f"base point must be a pair (x, y), got {point!r}") from None
    return x, y


def build_bilinear_series(f: ContinuousBilinearMap, point: Any) -> FormalMultilinearSeries:
    """
    Ряд f в точке (x, y).

    Args:
        f: Непрерывная билинейная map E × F → G
        point: Базовая точка (x, y), x ∈ E, y ∈ F

    Returns:
        FormalMultilinearSeries над (E × F, G) с нулевыми членами степени >= 3

    Raises:
        DomainMismatch: Если point не пара или компоненты не принадлежат E, F
    """
    x, y = _split_point(point)
    x_arr = f.first.validate_vector(x, name="base point (first component)")
    y_arr = f.second.validate_vector(y, name="base point (second component)")

    domain = product_domain(f)

    series = FormalMultilinearSeries.from_terms(
        domain,
        f.codomain,
        [
            constant_map(f(x_arr, y_arr), domain, f.codomain),
            bilinear_derivative(f, x_arr, y_arr),
            uncurry_bilinear(f),
        ],
        name="bilinear",
    )

    logger.debug(f"Built bilinear series of {domain} → {f.codomain} at (x={x_arr}, y={y_arr})")
    return series
