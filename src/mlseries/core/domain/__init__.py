"""
Domain models and value objects.

Normed spaces, multilinear maps and formal multilinear series.
"""

from mlseries.core.domain.multilinear_map import (
    MAX_TENSOR_DEGREE,
    ContinuousBilinearMap,
    ContinuousLinearMap,
    MultilinearMap,
    ScalarMonomialMap,
    TensorMultilinearMap,
    ZeroMultilinearMap,
    constant_map,
    zero_map,
)
from mlseries.core.domain.normed_space import (
    DomainMismatch,
    NormedSpace,
    ProductSpace,
    ScalarField,
    complex_space,
    real_space,
)
from mlseries.core.domain.series import FormalMultilinearSeries, evaluate_partial_sum

__all__ = [
    # Normed spaces
    "DomainMismatch",
    "NormedSpace",
    "ProductSpace",
    "ScalarField",
    "complex_space",
    "real_space",
    # Multilinear maps
    "MAX_TENSOR_DEGREE",
    "MultilinearMap",
    "ZeroMultilinearMap",
    "TensorMultilinearMap",
    "ScalarMonomialMap",
    "ContinuousLinearMap",
    "ContinuousBilinearMap",
    "constant_map",
    "zero_map",
    # Series
    "FormalMultilinearSeries",
    "evaluate_partial_sum",
]
