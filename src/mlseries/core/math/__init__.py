"""
Core math modules для mlseries

Численные примитивы и extended-real арифметика с явными конвенциями.
"""

# Numerical Safeguards
from mlseries.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    EPS_VECTOR_COMPARE_ABS,
    EPS_VECTOR_COMPARE_REL,
    # Validation
    is_valid_float,
    validate_degree,
    validate_non_negative,
    # Extended-real conventions
    safe_nth_root,
    safe_reciprocal,
    # Epsilon comparisons
    is_close,
    vectors_close,
)

# Extended reals
from mlseries.core.math.extended_real import (
    INFINITY,
    ExtendedNonNegReal,
    ExtendedRealKind,
    extended_min,
)

__all__ = [
    # Numerical Safeguards — Epsilon constants
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    "EPS_VECTOR_COMPARE_ABS",
    "EPS_VECTOR_COMPARE_REL",
    # Numerical Safeguards — Validation
    "is_valid_float",
    "validate_degree",
    "validate_non_negative",
    # Numerical Safeguards — Extended-real conventions
    "safe_nth_root",
    "safe_reciprocal",
    # Numerical Safeguards — Epsilon comparisons
    "is_close",
    "vectors_close",
    # Extended reals
    "INFINITY",
    "ExtendedNonNegReal",
    "ExtendedRealKind",
    "extended_min",
]
