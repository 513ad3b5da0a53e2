"""Convergence — радиус сходимости формальных multilinear рядов.

liminf 1/‖p(n)‖^{1/n}: точно (∞) для рядов с нулевым хвостом,
приближённо (оконный liminf) для остальных.
"""

from .radius import (
    RadiusComputation,
    RadiusConfig,
    RadiusMethod,
    RadiusResult,
    is_within_radius,
    norm_within_radius,
    radius,
    root_reciprocal,
    term_bounds,
)

__all__ = [
    "RadiusComputation",
    "RadiusConfig",
    "RadiusMethod",
    "RadiusResult",
    "is_within_radius",
    "norm_within_radius",
    "radius",
    "root_reciprocal",
    "term_bounds",
]
