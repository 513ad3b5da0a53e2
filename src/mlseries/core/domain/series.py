"""
FormalMultilinearSeries — Формальные multilinear ряды

p: n ↦ p(n), где p(n) — multilinear map степени n из V в W.

Семейство тотально по всем n >= 0: для степеней за пределами
представленных данных возвращается явный нулевой map, член никогда
не пропускается.

Представление ленивое: члены вычисляются по запросу фабрикой
term_factory и кэшируются. Если известно, что все члены степени
>= vanishes_from нулевые, фабрика для них не вызывается.

Partial sum:
    S_N(d) = Σ_{n=0..N} p(n)(d, …, d)

Член степени 0 входит в partial sum (но не в формулу радиуса).
"""

import logging
import numbers
from typing import Any, Callable, Optional, Sequence

import numpy as np

from mlseries.core.domain.multilinear_map import (
    MultilinearMap,
    ScalarMonomialMap,
    zero_map,
)
from mlseries.core.domain.normed_space import DomainMismatch, NormedSpace
from mlseries.core.math.numerical_safeguards import validate_degree

logger = logging.getLogger(__name__)


TermFactory = Callable[[int], MultilinearMap]


class FormalMultilinearSeries:
    """
    Immutable формальный multilinear ряд над (domain, codomain).

    Args:
        domain: Пространство смещений V
        codomain: Пространство значений W
        term_factory: n ↦ multilinear map степени n
        vanishes_from: Если задано, все члены степени >= vanishes_from
            являются нулевыми map'ами (фабрика для них не вызывается)
        name: Имя ряда (для диагностики)
    """

    def __init__(
        self,
        domain: NormedSpace,
        codomain: NormedSpace,
        term_factory: TermFactory,
        vanishes_from: Optional[int] = None,
        name: str = "",
    ):
        if domain.field != codomain.field:
            raise DomainMismatch(
                f"series between spaces over different fields: {domain} → {codomain}"
            )
        if vanishes_from is not None:
            validate_degree(vanishes_from, "vanishes_from")

        self._domain = domain
        self._codomain = codomain
        self._factory = term_factory
        self._vanishes_from = vanishes_from
        self._name = name
        self._terms: dict[int, MultilinearMap] = {}
        self._norms: dict[int, float] = {}

    # -------------------------------------------------------------------------
    # Конструкторы
    # -------------------------------------------------------------------------

    @classmethod
    def zero(cls, domain: NormedSpace, codomain: NormedSpace) -> "FormalMultilinearSeries":
        """Ряд, все члены которого нулевые"""
        return cls(
            domain,
            codomain,
            lambda n: zero_map(n, domain, codomain),
            vanishes_from=0,
            name="0",
        )

    @classmethod
    def from_terms(
        cls,
        domain: NormedSpace,
        codomain: NormedSpace,
        terms: Sequence[MultilinearMap],
        name: str = "",
    ) -> "FormalMultilinearSeries":
        """
        Ряд с конечным префиксом terms[0], terms[1], …; далее нули.

        Raises:
            DomainMismatch: Если terms[n] не степени n или не над (domain, codomain)
        """
        prefix = tuple(terms)
        series = cls(
            domain,
            codomain,
            lambda n: prefix[n],
            vanishes_from=len(prefix),
            name=name,
        )
        # Ошибки сигнатуры всплывают при построении, а не при первом обращении
        for n in range(len(prefix)):
            series.term(n)
        logger.debug(f"Built series {series!r} from {len(prefix)} explicit terms")
        return series

    @classmethod
    def from_scalar_coefficients(
        cls,
        coefficient: Callable[[int], Any],
        space: NormedSpace,
        vanishes_from: Optional[int] = None,
        name: str = "",
    ) -> "FormalMultilinearSeries":
        """
        Классический степенной ряд Σ aₙ zⁿ на одномерном пространстве.

        Args:
            coefficient: n ↦ aₙ
            space: Одномерное пространство (domain = codomain)
            vanishes_from: aₙ = 0 для n >= vanishes_from (если известно)

        Raises:
            DomainMismatch: Если space не одномерно
        """
        if space.dim != 1:
            raise DomainMismatch(f"scalar power series needs a one-dimensional space, got {space}")

        return cls(
            space,
            space,
            lambda n: ScalarMonomialMap(n, space, space, coefficient(n)),
            vanishes_from=vanishes_from,
            name=name,
        )

    # -------------------------------------------------------------------------
    # Свойства
    # -------------------------------------------------------------------------

    @property
    def domain(self) -> NormedSpace:
        return self._domain

    @property
    def codomain(self) -> NormedSpace:
        return self._codomain

    @property
    def vanishes_from(self) -> Optional[int]:
        return self._vanishes_from

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        label = f" {self._name!r}" if self._name else ""
        tail = "" if self._vanishes_from is None else f", zero from degree {self._vanishes_from}"
        return f"<FormalMultilinearSeries{label} {self._domain} → {self._codomain}{tail}>"

    # -------------------------------------------------------------------------
    # Члены
    # -------------------------------------------------------------------------

    def term(self, n: int) -> MultilinearMap:
        """
        Член степени n (тотально для всех n >= 0).

        Raises:
            ValueError: Если n отрицательное
            DomainMismatch: Если фабрика вернула map не той степени
                или не над (domain, codomain)
        """
        validate_degree(n)

        cached = self._terms.get(n)
        if cached is not None:
            return cached

        if self._vanishes_from is not None and n >= self._vanishes_from:
            result: MultilinearMap = zero_map(n, self._domain, self._codomain)
        else:
            result = self._factory(n)
            self._check_term(n, result)

        self._terms[n] = result
        return result

    def __getitem__(self, n: int) -> MultilinearMap:
        return self.term(n)

    def _check_term(self, n: int, term: Any) -> None:
        if not isinstance(term, MultilinearMap):
            raise DomainMismatch(f"term {n} is not a MultilinearMap: {term!r}")
        if term.degree != n:
            raise DomainMismatch(f"term {n} has degree {term.degree}")
        self._domain.require_same(term.domain, f"term {n} (domain)")
        self._codomain.require_same(term.codomain, f"term {n} (codomain)")

    def norm(self, n: int) -> float:
        """‖p(n)‖ — операторная норма (или её верхняя оценка) члена степени n"""
        cached = self._norms.get(n)
        if cached is not None:
            return cached

        value = self.term(n).opnorm()
        self._norms[n] = value
        return value

    def terms(self, max_degree: int) -> list[MultilinearMap]:
        validate_degree(max_degree, "max_degree")
        return [self.term(n) for n in range(max_degree + 1)]

    # -------------------------------------------------------------------------
    # Partial sums
    # -------------------------------------------------------------------------

    def partial_sums(self, displacement: Any, max_degree: int) -> list[np.ndarray]:
        """
        Последовательность S_0(d), S_1(d), …, S_N(d).

        Raises:
            ValueError: Если max_degree < 0
            DomainMismatch: Если displacement не принадлежит domain
        """
        validate_degree(max_degree, "max_degree")
        d = self._domain.validate_vector(displacement, name="displacement")

        sums = []
        total = self._codomain.zero()
        for n in range(max_degree + 1):
            term = self.term(n)
            if not term.is_zero():
                total = total + term.apply_diagonal(d)
            sums.append(total.copy())
        return sums

    def partial_sum(self, displacement: Any, max_degree: int) -> np.ndarray:
        """S_N(d) = Σ_{n=0..N} p(n)(d, …, d)"""
        validate_degree(max_degree, "max_degree")
        d = self._domain.validate_vector(displacement, name="displacement")

        total = self._codomain.zero()
        last = max_degree
        if self._vanishes_from is not None:
            last = min(max_degree, self._vanishes_from - 1)

        for n in range(last + 1):
            total = total + self.term(n).apply_diagonal(d)
        return total

    # -------------------------------------------------------------------------
    # Алгебра рядов
    # -------------------------------------------------------------------------

    def _require_same_spaces(self, other: Any, context: str) -> "FormalMultilinearSeries":
        if not isinstance(other, FormalMultilinearSeries):
            raise DomainMismatch(f"{context}: expected a FormalMultilinearSeries, got {type(other).__name__}")
        self._domain.require_same(other.domain, f"{context} (domain)")
        self._codomain.require_same(other.codomain, f"{context} (codomain)")
        return other

    def _combined_vanishing(self, other: "FormalMultilinearSeries") -> Optional[int]:
        if self._vanishes_from is None or other.vanishes_from is None:
            return None
        return max(self._vanishes_from, other.vanishes_from)

    def __add__(self, other: "FormalMultilinearSeries") -> "FormalMultilinearSeries":
        self._require_same_spaces(other, "series add")
        return FormalMultilinearSeries(
            self._domain,
            self._codomain,
            lambda n: self.term(n).add(other.term(n)),
            vanishes_from=self._combined_vanishing(other),
        )

    def __neg__(self) -> "FormalMultilinearSeries":
        return FormalMultilinearSeries(
            self._domain,
            self._codomain,
            lambda n: self.term(n).neg(),
            vanishes_from=self._vanishes_from,
        )

    def __sub__(self, other: "FormalMultilinearSeries") -> "FormalMultilinearSeries":
        self._require_same_spaces(other, "series sub")
        return self + (-other)

    def __mul__(self, c: Any) -> "FormalMultilinearSeries":
        if not isinstance(c, numbers.Number):
            return NotImplemented

        # Проверка поля выполняется сразу, а не при первом обращении к члену
        zero_map(0, self._domain, self._codomain).scale(c)

        return FormalMultilinearSeries(
            self._domain,
            self._codomain,
            lambda n: self.term(n).scale(c),
            vanishes_from=self._vanishes_from,
        )

    __rmul__ = __mul__


def evaluate_partial_sum(
    p: FormalMultilinearSeries, displacement: Any, max_degree: int
) -> np.ndarray:
    """
    Σ_{n=0..max_degree} p(n)(d, …, d).

    Args:
        p: Ряд
        displacement: Смещение d ∈ V
        max_degree: Степень усечения N (>= 0)

    Returns:
        Значение partial sum в W
    """
    return p.partial_sum(displacement, max_degree)
