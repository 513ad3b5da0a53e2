"""
ExtendedNonNegReal — Расширенные неотрицательные вещественные числа [0, ∞]

Immutable Pydantic модель (tagged variant: finite(r) | infinite).
Используется для радиуса сходимости и для промежуточных значений
liminf-формулы, чтобы ∞ был настоящим sentinel, а не float('inf')
или NaN.

Конвенции:
- 1/0 = ∞, 1/∞ = 0
- ∞^{1/n} = ∞ (n >= 1)
- 0 · ∞ = 0 (как в теории меры: нулевой член не даёт вклада)
- ∞ больше любого конечного значения
"""

import math
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field, field_validator, model_validator

from mlseries.core.math.numerical_safeguards import (
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    is_close,
    safe_nth_root,
    safe_reciprocal,
    validate_non_negative,
)


# =============================================================================
# ENUMS
# =============================================================================


class ExtendedRealKind(str, Enum):
    """Тег варианта extended real"""

    FINITE = "finite"
    INFINITE = "infinite"


# =============================================================================
# MODEL
# =============================================================================


class ExtendedNonNegReal(BaseModel):
    """
    Значение в [0, ∞] с явным бесконечным sentinel.

    Для INFINITE поле value всегда 0.0 (не несёт информации),
    поэтому равенство и hash совпадают для всех бесконечностей.
    """

    kind: ExtendedRealKind = Field(ExtendedRealKind.FINITE, description="finite | infinite")
    value: float = Field(0.0, ge=0.0, description="Конечное значение (только для FINITE)")

    model_config = {"frozen": True}

    @field_validator("value")
    @classmethod
    def validate_value_finite(cls, v: float) -> float:
        """Проверка, что value конечно: ∞ выражается только через kind"""
        if not math.isfinite(v):
            raise ValueError(f"value must be finite, use kind=INFINITE for ∞ (got {v})")
        return v

    @model_validator(mode="after")
    def validate_infinite_has_no_value(self) -> "ExtendedNonNegReal":
        """INFINITE не несёт конечного значения"""
        if self.kind == ExtendedRealKind.INFINITE and self.value != 0.0:
            raise ValueError("INFINITE extended real must have value 0.0")
        return self

    # -------------------------------------------------------------------------
    # Конструкторы
    # -------------------------------------------------------------------------

    @classmethod
    def finite(cls, value: float) -> "ExtendedNonNegReal":
        return cls(kind=ExtendedRealKind.FINITE, value=value)

    @classmethod
    def infinity(cls) -> "ExtendedNonNegReal":
        return cls(kind=ExtendedRealKind.INFINITE)

    @classmethod
    def zero(cls) -> "ExtendedNonNegReal":
        return cls(kind=ExtendedRealKind.FINITE, value=0.0)

    @classmethod
    def from_float(cls, value: float) -> "ExtendedNonNegReal":
        """
        Конверсия float → extended real.

        math.inf становится INFINITE; NaN и отрицательные значения
        отклоняются.

        Raises:
            ValueError: Если value NaN или отрицательное
        """
        validate_non_negative(value, "value", allow_inf=True)
        if math.isinf(value):
            return cls.infinity()
        return cls.finite(value)

    # -------------------------------------------------------------------------
    # Свойства
    # -------------------------------------------------------------------------

    @property
    def is_infinite(self) -> bool:
        return self.kind == ExtendedRealKind.INFINITE

    @property
    def is_finite(self) -> bool:
        return self.kind == ExtendedRealKind.FINITE

    def to_float(self) -> float:
        """math.inf для ∞, иначе конечное значение"""
        if self.is_infinite:
            return math.inf
        return self.value

    # -------------------------------------------------------------------------
    # Арифметика
    # -------------------------------------------------------------------------

    def reciprocal(self) -> "ExtendedNonNegReal":
        """1/x с конвенциями 1/0 = ∞, 1/∞ = 0"""
        return ExtendedNonNegReal.from_float(safe_reciprocal(self.to_float()))

    def nth_root(self, n: int) -> "ExtendedNonNegReal":
        """
        x^{1/n} для n >= 1.

        Raises:
            ValueError: Если n < 1 (у степени 0 корня нет)
        """
        return ExtendedNonNegReal.from_float(safe_nth_root(self.to_float(), n))

    def __mul__(self, other: Union["ExtendedNonNegReal", float]) -> "ExtendedNonNegReal":
        other_ext = _coerce(other)

        # 0 · ∞ = 0
        if (self.is_finite and self.value == 0.0) or (
            other_ext.is_finite and other_ext.value == 0.0
        ):
            return ExtendedNonNegReal.zero()

        if self.is_infinite or other_ext.is_infinite:
            return ExtendedNonNegReal.infinity()

        return ExtendedNonNegReal.from_float(self.value * other_ext.value)

    __rmul__ = __mul__

    # -------------------------------------------------------------------------
    # Порядок
    # -------------------------------------------------------------------------

    def _key(self) -> tuple[int, float]:
        return (1, 0.0) if self.is_infinite else (0, self.value)

    def __lt__(self, other: Union["ExtendedNonNegReal", float]) -> bool:
        return self._key() < _coerce(other)._key()

    def __le__(self, other: Union["ExtendedNonNegReal", float]) -> bool:
        return self._key() <= _coerce(other)._key()

    def __gt__(self, other: Union["ExtendedNonNegReal", float]) -> bool:
        return self._key() > _coerce(other)._key()

    def __ge__(self, other: Union["ExtendedNonNegReal", float]) -> bool:
        return self._key() >= _coerce(other)._key()

    def is_close(
        self,
        other: Union["ExtendedNonNegReal", float],
        rel_tol: float = EPS_FLOAT_COMPARE_REL,
        abs_tol: float = EPS_FLOAT_COMPARE_ABS,
    ) -> bool:
        """
        Сравнение с толерантностью.

        Две бесконечности близки; бесконечность и конечное значение
        никогда не близки, каким бы большим ни было конечное.
        """
        other_ext = _coerce(other)
        if self.is_infinite or other_ext.is_infinite:
            return self.is_infinite and other_ext.is_infinite
        return is_close(self.value, other_ext.value, rel_tol=rel_tol, abs_tol=abs_tol)

    def __str__(self) -> str:
        if self.is_infinite:
            return "∞"
        return f"{self.value:.12g}"


def _coerce(value: Union[ExtendedNonNegReal, float]) -> ExtendedNonNegReal:
    if isinstance(value, ExtendedNonNegReal):
        return value
    return ExtendedNonNegReal.from_float(float(value))


def extended_min(values) -> ExtendedNonNegReal:
    """
    Минимум набора extended reals.

    Инфимум пустого набора в [0, ∞] равен ∞.
    """
    result = ExtendedNonNegReal.infinity()
    for v in values:
        if v < result:
            result = v
    return result


INFINITY = ExtendedNonNegReal.infinity()
