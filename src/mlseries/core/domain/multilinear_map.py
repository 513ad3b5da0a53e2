"""
MultilinearMap — Непрерывные multilinear maps степени n

M: V^n → W, линейная по каждому из n аргументов.
- Степень 0 — константа (аргументов нет)
- Степень 1 — линейная map

Представления:
- ZeroMultilinearMap — явный нулевой map степени n (без тензора)
- TensorMultilinearMap — тензор коэффициентов формы (dim W, dim V, ..., dim V)
- ScalarMonomialMap — (v₁, …, vₙ) ↦ a·v₁…vₙ на одномерных пространствах;
  не материализует тензор, поэтому допускает произвольно большие степени

Операторная норма ‖M‖ = sup ‖M(v₁,…,vₙ)‖ по единичным входам:
- точная для степени 0, для степени 1 между ℓ¹/ℓ²/ℓ^∞ одного порядка
  и для одномерных пространств
- иначе гарантированная верхняя оценка Σ|T| (ноль тогда и только тогда,
  когда map нулевой)

Все map'ы immutable: тензоры хранятся read-only.
"""

import cmath
import math
import numbers
from dataclasses import dataclass
from typing import Any, Final

import numpy as np

from mlseries.core.domain.normed_space import (
    DomainMismatch,
    NormedSpace,
    ProductSpace,
    ScalarField,
)
from mlseries.core.math.numerical_safeguards import validate_degree


# =============================================================================
# CONSTANTS
# =============================================================================

# Максимальная степень тензорного представления (ndim тензора = degree + 1,
# numpy ограничивает ndim значением 32)
MAX_TENSOR_DEGREE: Final[int] = 31


# =============================================================================
# HELPERS
# =============================================================================


def _check_scalar(c: Any, field: ScalarField, allow_unbounded: bool = False) -> complex:
    """
    Скаляр поля: комплексный скаляр в вещественном пространстве запрещён.

    Args:
        c: Кандидат
        field: Поле codomain
        allow_unbounded: Допускается ли ±∞ (и целые вне диапазона float,
            которые становятся ±∞). NaN не допускается никогда.
    """
    if not isinstance(c, numbers.Number) or isinstance(c, bool):
        raise ValueError(f"scalar must be a number, got {c!r}")

    try:
        value = complex(c)
    except OverflowError:
        if not allow_unbounded:
            raise ValueError(f"scalar {c!r} is outside the float range") from None
        # Точное целое вне диапазона float: модуль бесконечен
        negative = isinstance(c, numbers.Real) and c < 0
        value = complex(-math.inf if negative else math.inf, 0.0)

    if cmath.isnan(value):
        raise ValueError(f"scalar must not be NaN, got {c!r}")

    if not allow_unbounded and not cmath.isfinite(value):
        raise ValueError(f"scalar must be finite, got {c!r}")

    if field == ScalarField.REAL and value.imag != 0.0:
        raise DomainMismatch(f"complex scalar {c!r} acting on a real space")

    return value


def _as_field_scalar(value: complex, field: ScalarField) -> Any:
    return value.real if field == ScalarField.REAL else value


def _readonly_array(data: Any, field: ScalarField, name: str) -> np.ndarray:
    arr = np.array(data, copy=True)

    if not np.issubdtype(arr.dtype, np.number):
        raise DomainMismatch(f"{name} has non-numeric dtype {arr.dtype}")

    if np.iscomplexobj(arr) and field == ScalarField.REAL:
        if np.any(arr.imag != 0):
            raise DomainMismatch(f"{name} is complex but the spaces are real")
        arr = arr.real

    arr = arr.astype(field.dtype, copy=False)

    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} contains NaN/Inf")

    arr.setflags(write=False)
    return arr


def _require_same_field(*spaces: NormedSpace) -> None:
    fields = {s.field for s in spaces}
    if len(fields) > 1:
        names = ", ".join(f"{s} ({s.field.value})" for s in spaces)
        raise DomainMismatch(f"spaces over different scalar fields: {names}")


# =============================================================================
# BASE
# =============================================================================


@dataclass(frozen=True, eq=False)
class MultilinearMap:
    """
    Непрерывный multilinear map степени degree из domain^degree в codomain.

    Базовый класс: конкретные представления реализуют _apply, opnorm,
    is_zero и to_tensor.
    """

    degree: int
    domain: NormedSpace
    codomain: NormedSpace

    def __post_init__(self) -> None:
        validate_degree(self.degree)
        _require_same_field(self.domain, self.codomain)

    # -------------------------------------------------------------------------
    # Применение
    # -------------------------------------------------------------------------

    def __call__(self, *vectors: Any) -> np.ndarray:
        """
        M(v₁, …, vₙ).

        Raises:
            DomainMismatch: Если число аргументов != degree или вектор
                не принадлежит domain
        """
        if len(vectors) != self.degree:
            raise DomainMismatch(
                f"degree-{self.degree} map expects {self.degree} arguments, got {len(vectors)}"
            )

        args = [
            self.domain.validate_vector(v, name=f"argument {i}") for i, v in enumerate(vectors)
        ]
        return self._apply(args)

    def apply_diagonal(self, d: Any) -> np.ndarray:
        """M(d, d, …, d) — член степени n в partial sum"""
        d_arr = self.domain.validate_vector(d, name="displacement")
        return self._apply([d_arr] * self.degree)

    def _apply(self, args: list[np.ndarray]) -> np.ndarray:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Норма
    # -------------------------------------------------------------------------

    def opnorm(self) -> float:
        raise NotImplementedError

    @property
    def norm_is_exact(self) -> bool:
        """True если opnorm() — точная операторная норма, а не верхняя оценка"""
        return True

    def is_zero(self) -> bool:
        raise NotImplementedError

    def to_tensor(self) -> np.ndarray:
        raise NotImplementedError

    # -------------------------------------------------------------------------
    # Алгебра
    # -------------------------------------------------------------------------

    def require_same_signature(self, other: "MultilinearMap", context: str) -> None:
        """
        Проверка совпадения степени, domain и codomain.

        Raises:
            DomainMismatch: Если сигнатуры различаются
        """
        if not isinstance(other, MultilinearMap):
            raise DomainMismatch(f"{context}: expected a MultilinearMap, got {type(other).__name__}")
        if other.degree != self.degree:
            raise DomainMismatch(f"{context}: degree {self.degree} vs {other.degree}")
        self.domain.require_same(other.domain, f"{context} (domain)")
        self.codomain.require_same(other.codomain, f"{context} (codomain)")

    def add(self, other: "MultilinearMap") -> "MultilinearMap":
        self.require_same_signature(other, "add")
        if self.is_zero():
            return other
        if other.is_zero():
            return self
        return self._add_nonzero(other)

    def _add_nonzero(self, other: "MultilinearMap") -> "MultilinearMap":
        return TensorMultilinearMap(
            self.degree,
            self.domain,
            self.codomain,
            self.to_tensor() + other.to_tensor(),
        )

    def scale(self, c: Any) -> "MultilinearMap":
        value = _check_scalar(c, self.codomain.field)
        if value == 0:
            return zero_map(self.degree, self.domain, self.codomain)
        return self._scale_nonzero(_as_field_scalar(value, self.codomain.field))

    def _scale_nonzero(self, c: Any) -> "MultilinearMap":
        raise NotImplementedError

    def neg(self) -> "MultilinearMap":
        return self.scale(-1)

    def __add__(self, other: "MultilinearMap") -> "MultilinearMap":
        return self.add(other)

    def __sub__(self, other: "MultilinearMap") -> "MultilinearMap":
        self.require_same_signature(other, "sub")
        return self.add(other.neg())

    def __neg__(self) -> "MultilinearMap":
        return self.neg()

    def __mul__(self, c: Any) -> "MultilinearMap":
        return self.scale(c)

    __rmul__ = __mul__

    def __repr__(self) -> str:
        return f"{type(self).__name__}(degree={self.degree}, {self.domain} → {self.codomain})"


# =============================================================================
# ZERO MAP
# =============================================================================


@dataclass(frozen=True, eq=False)
class ZeroMultilinearMap(MultilinearMap):
    """Явный нулевой map степени degree"""

    def _apply(self, args: list[np.ndarray]) -> np.ndarray:
        return self.codomain.zero()

    def opnorm(self) -> float:
        return 0.0

    def is_zero(self) -> bool:
        return True

    def to_tensor(self) -> np.ndarray:
        _require_tensor_degree(self.degree)
        shape = (self.codomain.dim,) + (self.domain.dim,) * self.degree
        return np.zeros(shape, dtype=self.codomain.field.dtype)

    def _scale_nonzero(self, c: Any) -> "MultilinearMap":
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZeroMultilinearMap):
            return NotImplemented
        return (
            self.degree == other.degree
            and self.domain == other.domain
            and self.codomain == other.codomain
        )

    def __hash__(self) -> int:
        return hash((self.degree, self.domain, self.codomain))


# =============================================================================
# TENSOR MAP
# =============================================================================


def _require_tensor_degree(degree: int) -> None:
    if degree > MAX_TENSOR_DEGREE:
        raise ValueError(
            f"degree {degree} exceeds the tensor representation limit {MAX_TENSOR_DEGREE}"
        )


@dataclass(frozen=True, eq=False)
class TensorMultilinearMap(MultilinearMap):
    """
    Map, заданный тензором коэффициентов T:

        M(v₁, …, vₙ)_g = Σ T[g, i₁, …, iₙ] · v₁[i₁] · … · vₙ[iₙ]

    Последняя ось тензора соответствует последнему аргументу.
    """

    tensor: Any = None

    def __post_init__(self) -> None:
        super().__post_init__()
        _require_tensor_degree(self.degree)

        arr = _readonly_array(self.tensor, self.codomain.field, "tensor")
        expected = (self.codomain.dim,) + (self.domain.dim,) * self.degree
        if arr.shape != expected:
            raise DomainMismatch(
                f"tensor of shape {arr.shape} does not match degree-{self.degree} map "
                f"{self.domain} → {self.codomain} (expected {expected})"
            )

        object.__setattr__(self, "tensor", arr)

    def _apply(self, args: list[np.ndarray]) -> np.ndarray:
        result = self.tensor
        # matmul сворачивает последнюю ось: аргументы применяются с конца
        for v in reversed(args):
            result = result @ v
        return np.array(result, dtype=self.codomain.field.dtype)

    def _induced_norm_available(self) -> bool:
        return (
            self.degree == 1
            and not isinstance(self.domain, ProductSpace)
            and not isinstance(self.codomain, ProductSpace)
            and self.domain.norm_ord == self.codomain.norm_ord
        )

    def opnorm(self) -> float:
        if self.tensor.size == 0:
            return 0.0

        if self.degree == 0:
            return self.codomain.norm(self.tensor)

        if self._induced_norm_available():
            # Индуцированные матричные нормы: column-sum, spectral, row-sum
            return float(np.linalg.norm(self.tensor, ord=self.domain.norm_ord))

        return float(np.abs(self.tensor).sum())

    @property
    def norm_is_exact(self) -> bool:
        return (
            self.degree == 0
            or self._induced_norm_available()
            or (self.domain.dim <= 1 and self.codomain.dim <= 1)
            or self.is_zero()
        )

    def is_zero(self) -> bool:
        return not bool(np.any(self.tensor))

    def to_tensor(self) -> np.ndarray:
        return self.tensor

    def _scale_nonzero(self, c: Any) -> "MultilinearMap":
        return TensorMultilinearMap(self.degree, self.domain, self.codomain, self.tensor * c)


# =============================================================================
# SCALAR MONOMIAL
# =============================================================================


@dataclass(frozen=True, eq=False)
class ScalarMonomialMap(MultilinearMap):
    """
    (v₁, …, vₙ) ↦ a · v₁ · … · vₙ на одномерных domain и codomain.

    Член степени n классического степенного ряда Σ aₙ zⁿ.
    Норма равна |a| точно.

    Коэффициент может быть неограниченным (±∞ или целое вне диапазона
    float, например n! при n >= 171): такой член имеет норму ∞ и даёт
    ρₙ = 0 в формуле радиуса. Вычислить его можно только на наборе
    с нулевым аргументом.
    """

    coefficient: Any = 0.0

    def __post_init__(self) -> None:
        super().__post_init__()

        if self.domain.dim != 1 or self.codomain.dim != 1:
            raise DomainMismatch(
                f"scalar monomial requires one-dimensional spaces, got {self.domain} → {self.codomain}"
            )

        value = _check_scalar(self.coefficient, self.codomain.field, allow_unbounded=True)
        object.__setattr__(self, "coefficient", _as_field_scalar(value, self.codomain.field))

    @property
    def is_unbounded(self) -> bool:
        return math.isinf(abs(self.coefficient))

    def _apply(self, args: list[np.ndarray]) -> np.ndarray:
        if self.is_unbounded:
            if any(v[0] == 0 for v in args):
                return self.codomain.zero()
            raise ValueError(
                f"degree-{self.degree} term has an unbounded coefficient "
                f"and cannot be evaluated at nonzero arguments"
            )

        product = self.coefficient
        for v in args:
            product = product * v[0]
        return np.array([product], dtype=self.codomain.field.dtype)

    def opnorm(self) -> float:
        return float(abs(self.coefficient))

    def is_zero(self) -> bool:
        return self.coefficient == 0

    def to_tensor(self) -> np.ndarray:
        _require_tensor_degree(self.degree)
        return np.full(
            (1,) * (self.degree + 1), self.coefficient, dtype=self.codomain.field.dtype
        )

    def _add_nonzero(self, other: MultilinearMap) -> MultilinearMap:
        if isinstance(other, ScalarMonomialMap):
            return ScalarMonomialMap(
                self.degree, self.domain, self.codomain, self.coefficient + other.coefficient
            )
        return super()._add_nonzero(other)

    def _scale_nonzero(self, c: Any) -> MultilinearMap:
        return ScalarMonomialMap(self.degree, self.domain, self.codomain, self.coefficient * c)


# =============================================================================
# FACTORIES
# =============================================================================


def zero_map(degree: int, domain: NormedSpace, codomain: NormedSpace) -> ZeroMultilinearMap:
    """Нулевой map степени degree"""
    return ZeroMultilinearMap(degree, domain, codomain)


def constant_map(value: Any, domain: NormedSpace, codomain: NormedSpace) -> TensorMultilinearMap:
    """Map степени 0, возвращающий value"""
    return TensorMultilinearMap(0, domain, codomain, codomain.validate_vector(value, "constant"))


# =============================================================================
# LINEAR / BILINEAR MAPS
# =============================================================================


@dataclass(frozen=True, eq=False)
class ContinuousLinearMap:
    """
    Непрерывная линейная map f: E → F, заданная матрицей формы (dim F, dim E).
    """

    domain: NormedSpace
    codomain: NormedSpace
    matrix: Any

    def __post_init__(self) -> None:
        _require_same_field(self.domain, self.codomain)

        arr = _readonly_array(self.matrix, self.codomain.field, "matrix")
        expected = (self.codomain.dim, self.domain.dim)
        if arr.shape != expected:
            raise DomainMismatch(
                f"matrix of shape {arr.shape} does not map {self.domain} → {self.codomain} "
                f"(expected {expected})"
            )
        object.__setattr__(self, "matrix", arr)

    @classmethod
    def identity(cls, space: NormedSpace) -> "ContinuousLinearMap":
        return cls(space, space, np.eye(space.dim, dtype=space.field.dtype))

    def __call__(self, v: Any) -> np.ndarray:
        return self.matrix @ self.domain.validate_vector(v)

    def as_multilinear(self) -> TensorMultilinearMap:
        """f как multilinear map степени 1"""
        return TensorMultilinearMap(1, self.domain, self.codomain, self.matrix)

    def opnorm(self) -> float:
        return self.as_multilinear().opnorm()


@dataclass(frozen=True, eq=False)
class ContinuousBilinearMap:
    """
    Непрерывная билинейная map f: E × F → G, заданная тензором формы
    (dim G, dim E, dim F):

        f(x, y)_g = Σ T[g, i, j] · x[i] · y[j]
    """

    first: NormedSpace
    second: NormedSpace
    codomain: NormedSpace
    tensor: Any

    def __post_init__(self) -> None:
        _require_same_field(self.first, self.second, self.codomain)

        arr = _readonly_array(self.tensor, self.codomain.field, "tensor")
        expected = (self.codomain.dim, self.first.dim, self.second.dim)
        if arr.shape != expected:
            raise DomainMismatch(
                f"tensor of shape {arr.shape} does not map {self.first} × {self.second} → "
                f"{self.codomain} (expected {expected})"
            )
        object.__setattr__(self, "tensor", arr)

    def __call__(self, x: Any, y: Any) -> np.ndarray:
        x_arr = self.first.validate_vector(x, "first argument")
        y_arr = self.second.validate_vector(y, "second argument")
        return np.einsum("gij,i,j->g", self.tensor, x_arr, y_arr)

    def fix_first(self, x: Any) -> ContinuousLinearMap:
        """y ↦ f(x, y)"""
        x_arr = self.first.validate_vector(x, "first argument")
        return ContinuousLinearMap(
            self.second, self.codomain, np.einsum("gij,i->gj", self.tensor, x_arr)
        )

    def fix_second(self, y: Any) -> ContinuousLinearMap:
        """x ↦ f(x, y)"""
        y_arr = self.second.validate_vector(y, "second argument")
        return ContinuousLinearMap(
            self.first, self.codomain, np.einsum("gij,j->gi", self.tensor, y_arr)
        )

    def opnorm(self) -> float:
        """Верхняя оценка Σ|T| операторной нормы"""
        return float(np.abs(self.tensor).sum())
