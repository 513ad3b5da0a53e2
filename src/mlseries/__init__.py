"""
mlseries — formal multilinear series and their radius of convergence.

Public call contracts:
- build_linear_series(f, x)
- build_bilinear_series(f, (x, y))
- radius(p)
- evaluate_partial_sum(p, displacement, max_degree)
"""

from mlseries.builders import build_bilinear_series, build_linear_series
from mlseries.convergence import radius
from mlseries.core.domain import (
    ContinuousBilinearMap,
    ContinuousLinearMap,
    DomainMismatch,
    FormalMultilinearSeries,
    MultilinearMap,
    NormedSpace,
    ProductSpace,
    ScalarField,
    evaluate_partial_sum,
)
from mlseries.core.math import ExtendedNonNegReal

__version__ = "0.1.0"

__all__ = [
    # Call contracts
    "build_linear_series",
    "build_bilinear_series",
    "radius",
    "evaluate_partial_sum",
    # Types
    "ContinuousBilinearMap",
    "ContinuousLinearMap",
    "DomainMismatch",
    "ExtendedNonNegReal",
    "FormalMultilinearSeries",
    "MultilinearMap",
    "NormedSpace",
    "ProductSpace",
    "ScalarField",
]
