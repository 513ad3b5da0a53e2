"""
NormedSpace — Конечномерные нормированные пространства над ℝ или ℂ

Immutable Pydantic модели, описывающие пространства E, F, G, в которых
живут точки, смещения и значения multilinear maps.

Векторы — одномерные numpy.ndarray длины dim. Сами векторы
не оборачиваются: модель пространства только валидирует их
и вычисляет норму.

Нормы:
- norm_ord = 1    → ℓ¹
- norm_ord = 2    → евклидова (default)
- norm_ord = inf  → sup-норма

ProductSpace(E, F) — произведение с sup-нормой max(‖x‖, ‖y‖).
"""

import math
from enum import Enum
from typing import Any

import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# EXCEPTIONS
# =============================================================================


class DomainMismatch(ValueError):
    """
    Несовпадение пространств или скалярных полей.

    Возникает, когда map, точка, вектор или операнд series относится
    к другому пространству (размерность, поле, норма), чем ожидается.
    Никогда не исправляется молча (без приведения типов).
    """

    pass


# =============================================================================
# ENUMS
# =============================================================================


class ScalarField(str, Enum):
    """Скалярное поле (недискретное нормированное поле)"""

    REAL = "real"
    COMPLEX = "complex"

    @property
    def dtype(self) -> type:
        return np.float64 if self == ScalarField.REAL else np.complex128


SUPPORTED_NORM_ORDS = (1.0, 2.0, math.inf)


# =============================================================================
# NORMED SPACE
# =============================================================================


class NormedSpace(BaseModel):
    """
    Конечномерное нормированное пространство K^dim.

    Два пространства совпадают тогда и только тогда, когда совпадают
    имя, размерность, поле и норма.
    """

    name: str = Field("", description="Имя пространства (для диагностики)")
    dim: int = Field(..., ge=0, description="Размерность")
    field: ScalarField = Field(ScalarField.REAL, description="Скалярное поле")
    norm_ord: float = Field(2.0, description="Порядок ℓᵖ-нормы: 1, 2 или inf")

    model_config = {"frozen": True}

    @field_validator("norm_ord")
    @classmethod
    def validate_norm_ord(cls, v: float) -> float:
        """Поддерживаются только ℓ¹, ℓ² и ℓ^∞"""
        if v not in SUPPORTED_NORM_ORDS:
            raise ValueError(f"norm_ord must be one of 1, 2, inf, got {v}")
        return float(v)

    def __str__(self) -> str:
        if self.name:
            return self.name
        symbol = "ℝ" if self.field == ScalarField.REAL else "ℂ"
        return f"{symbol}^{self.dim}"

    def zero(self) -> np.ndarray:
        return np.zeros(self.dim, dtype=self.field.dtype)

    def norm(self, v: Any) -> float:
        """Норма вектора этого пространства"""
        arr = self.validate_vector(v)
        if self.dim == 0:
            return 0.0
        return float(np.linalg.norm(arr, ord=self.norm_ord))

    def validate_vector(self, v: Any, name: str = "vector") -> np.ndarray:
        """
        Проверка и нормализация вектора.

        Args:
            v: Кандидат (array-like)
            name: Имя аргумента для сообщения об ошибке

        Returns:
            numpy-массив формы (dim,) с dtype поля

        Raises:
            DomainMismatch: Если форма не (dim,), вектор комплексный
                в вещественном пространстве или содержит NaN/Inf
        """
        arr = np.asarray(v)

        if arr.ndim != 1 or arr.shape[0] != self.dim:
            raise DomainMismatch(
                f"{name} of shape {arr.shape} does not belong to {self} (dim={self.dim})"
            )

        if not (np.issubdtype(arr.dtype, np.number) or arr.dtype == np.bool_):
            raise DomainMismatch(f"{name} has non-numeric dtype {arr.dtype}")

        if np.iscomplexobj(arr) and self.field == ScalarField.REAL:
            raise DomainMismatch(f"{name} is complex but {self} is a real space")

        arr = arr.astype(self.field.dtype, copy=False)

        if not np.all(np.isfinite(arr)):
            raise DomainMismatch(f"{name} contains NaN/Inf")

        return arr

    def require_same(self, other: "NormedSpace", context: str) -> None:
        """
        Проверка совпадения пространств.

        Raises:
            DomainMismatch: Если пространства различаются
        """
        if self != other:
            raise DomainMismatch(f"{context}: expected {self!r}, got {other!r}")


# =============================================================================
# PRODUCT SPACE
# =============================================================================


class ProductSpace(NormedSpace):
    """
    Произведение E × F с sup-нормой ‖(x, y)‖ = max(‖x‖_E, ‖y‖_F).

    Векторы хранятся конкатенацией [x, y]; dim, field и norm_ord
    выводятся из сомножителей.
    """

    first: NormedSpace = Field(..., description="Первый сомножитель E")
    second: NormedSpace = Field(..., description="Второй сомножитель F")

    @model_validator(mode="before")
    @classmethod
    def derive_from_factors(cls, data: Any) -> Any:
        """dim/field/name выводятся из сомножителей, поля должны совпадать"""
        if not isinstance(data, dict):
            return data

        first = data.get("first")
        second = data.get("second")
        if not isinstance(first, NormedSpace) or not isinstance(second, NormedSpace):
            return data

        if first.field != second.field:
            raise ValueError(
                f"product of spaces over different fields: {first.field.value} × {second.field.value}"
            )

        derived = dict(data)
        derived.setdefault("name", f"{first} × {second}")
        derived["dim"] = first.dim + second.dim
        derived["field"] = first.field
        derived["norm_ord"] = math.inf
        return derived

    @classmethod
    def of(cls, first: NormedSpace, second: NormedSpace) -> "ProductSpace":
        """
        E × F.

        Raises:
            DomainMismatch: Если сомножители над разными полями
        """
        if first.field != second.field:
            raise DomainMismatch(
                f"product of spaces over different fields: {first.field.value} × {second.field.value}"
            )
        return cls(first=first, second=second)

    def norm(self, v: Any) -> float:
        x, y = self.split(v)
        return max(self.first.norm(x), self.second.norm(y))

    def pair(self, x: Any, y: Any) -> np.ndarray:
        """(x, y) → вектор произведения"""
        x_arr = self.first.validate_vector(x, "first component")
        y_arr = self.second.validate_vector(y, "second component")
        return np.concatenate([x_arr, y_arr]).astype(self.field.dtype, copy=False)

    def split(self, v: Any) -> tuple[np.ndarray, np.ndarray]:
        """Вектор произведения → (x, y)"""
        arr = self.validate_vector(v)
        return arr[: self.first.dim], arr[self.first.dim :]

    def fst(self, v: Any) -> np.ndarray:
        return self.split(v)[0]

    def snd(self, v: Any) -> np.ndarray:
        return self.split(v)[1]


def real_space(dim: int, norm_ord: float = 2.0, name: str = "") -> NormedSpace:
    """Короткий конструктор ℝ^dim"""
    return NormedSpace(name=name, dim=dim, field=ScalarField.REAL, norm_ord=norm_ord)


def complex_space(dim: int, norm_ord: float = 2.0, name: str = "") -> NormedSpace:
    """Короткий конструктор ℂ^dim"""
    return NormedSpace(name=name, dim=dim, field=ScalarField.COMPLEX, norm_ord=norm_ord)
