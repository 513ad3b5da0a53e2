"""Builders — ряды линейных и билинейных map в точке.

- build_linear_series: f(x) + f(d), нулевой хвост с степени 2
- build_bilinear_series: f(x,y) + производная + uncurry f, нулевой хвост с степени 3
- PowerSeriesExpansion: функция + ряд + радиус, проверка аппроксимации
"""

from .bilinear import (
    bilinear_derivative,
    build_bilinear_series,
    product_domain,
    uncurry_bilinear,
)
from .expansion import (
    ExpansionCheckResult,
    PowerSeriesExpansion,
    bilinear_expansion,
    linear_expansion,
)
from .linear import build_linear_series

__all__ = [
    # Linear
    "build_linear_series",
    # Bilinear
    "bilinear_derivative",
    "build_bilinear_series",
    "product_domain",
    "uncurry_bilinear",
    # Expansions
    "ExpansionCheckResult",
    "PowerSeriesExpansion",
    "bilinear_expansion",
    "linear_expansion",
]
