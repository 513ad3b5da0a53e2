"""
Numerical Safeguards — Safe Math Primitives для formal multilinear series

Модуль обеспечивает численную устойчивость всех операций ядра:
- Epsilon-параметры для сравнений float и векторов
- Валидация float (NaN/Inf никогда не принимаются молча)
- Явные extended-real конвенции: 1/0 = ∞, 1/∞ = 0, ∞^{1/n} = ∞
- Epsilon-сравнения скаляров и векторов с учётом машинной точности

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль никогда не выполняется через IEEE-754 (конвенция явная)
2. n-й корень извлекается только при n >= 1 (степень 0 исключена)
3. NaN никогда не пропагирует (ValueError на входе)
4. Все операции детерминированы и воспроизводимы
"""

import math
from typing import Final

import numpy as np

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Epsilon для сравнения float (относительная толерантность)
# Используется в is_close и как толерантность сходимости liminf
EPS_FLOAT_COMPARE_REL: Final[float] = 1e-9

# Epsilon для сравнения float (абсолютная толерантность)
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12

# Толерантность сравнения значений partial sum с целевой функцией
# Суммы тензорных свёрток теряют несколько ulp на каждую степень
EPS_VECTOR_COMPARE_REL: Final[float] = 1e-9
EPS_VECTOR_COMPARE_ABS: Final[float] = 1e-10


# =============================================================================
# ВАЛИДАЦИЯ FLOAT
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение валидное (finite), False если NaN или Inf
    """
    return math.isfinite(value)


def validate_non_negative(value: float, name: str, allow_inf: bool = False) -> None:
    """
    Валидация, что значение неотрицательное.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)
        allow_inf: Допускается ли +inf (например, для норм, переполнивших float)

    Raises:
        ValueError: Если value < 0, NaN или (при allow_inf=False) Inf
    """
    if math.isnan(value):
        raise ValueError(f"{name} must not be NaN")

    if not allow_inf and not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_degree(n: int, name: str = "degree", minimum: int = 0) -> None:
    """
    Валидация степени (натуральное число >= minimum).

    bool отклоняется явно: True/False не являются степенями.

    Raises:
        ValueError: Если n не int или n < minimum
    """
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise ValueError(f"{name} must be an integer, got {n!r}")

    if n < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {n}")


# =============================================================================
# EXTENDED-REAL КОНВЕНЦИИ
# =============================================================================


def safe_reciprocal(value: float) -> float:
    """
    Обратное значение в [0, ∞] с явными конвенциями.

    1/0 = ∞ и 1/∞ = 0. Деление на ноль никогда не выполняется.

    Args:
        value: Неотрицательное значение (допускается +inf)

    Returns:
        1/value, math.inf для 0, 0.0 для +inf

    Raises:
        ValueError: Если value отрицательное или NaN

    Examples:
        >>> safe_reciprocal(4.0)
        0.25
        >>> safe_reciprocal(0.0)
        inf
        >>> safe_reciprocal(math.inf)
        0.0
    """
    validate_non_negative(value, "value", allow_inf=True)

    if value == 0.0:
        return math.inf
    if math.isinf(value):
        return 0.0

    result = 1.0 / value
    # 1/subnormal переполняется в inf: это и есть верное extended-значение
    return result


def safe_nth_root(value: float, n: int) -> float:
    """
    n-й корень неотрицательного значения в [0, ∞].

    Вычисляется через логарифм, поэтому большие конечные значения
    (до max float) не переполняются. 0^{1/n} = 0, ∞^{1/n} = ∞.

    Степень n = 0 не имеет корня и отклоняется, а не вычисляется.

    Args:
        value: Неотрицательное значение (допускается +inf)
        n: Степень корня (>= 1)

    Returns:
        value ** (1/n)

    Raises:
        ValueError: Если n < 1, value отрицательное или NaN

    Examples:
        >>> safe_nth_root(8.0, 3)
        2.0
        >>> safe_nth_root(0.0, 5)
        0.0
    """
    validate_degree(n, "n", minimum=1)
    validate_non_negative(value, "value", allow_inf=True)

    if value == 0.0:
        return 0.0
    if math.isinf(value):
        return math.inf
    if n == 1:
        return value

    return math.exp(math.log(value) / n)


# =============================================================================
# EPSILON-СРАВНЕНИЯ
# =============================================================================


def is_close(
    a: float,
    b: float,
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Сравнение float с учётом машинной точности.

    Алгоритм:
        abs(a - b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol)

    Examples:
        >>> is_close(1.0, 1.0 + 1e-10)
        True
        >>> is_close(1.0, 1.1)
        False
    """
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


def vectors_close(
    a: np.ndarray,
    b: np.ndarray,
    rel_tol: float = EPS_VECTOR_COMPARE_REL,
    abs_tol: float = EPS_VECTOR_COMPARE_ABS,
) -> bool:
    """
    Покомпонентное сравнение векторов с толерантностью.

    Векторы разной формы никогда не считаются близкими.

    Args:
        a: Первый вектор
        b: Второй вектор
        rel_tol: Относительная толерантность
        abs_tol: Абсолютная толерантность

    Returns:
        True если формы совпадают и все компоненты близки
    """
    a_arr = np.asarray(a)
    b_arr = np.asarray(b)

    if a_arr.shape != b_arr.shape:
        return False

    return bool(np.allclose(a_arr, b_arr, rtol=rel_tol, atol=abs_tol))
