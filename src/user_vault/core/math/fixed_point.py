"""
Fixed Point — целочисленная арифметика для учёта сумм

Все суммы в системе — целые числа в минимальных единицах токена
(для base asset с 6 знаками: 1 USDC = 1_000_000). Ставки — целые basis points
из BPS_DENOMINATOR.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Округление всегда вниз (floor), никогда в пользу получателя комиссии
2. Никаких float в расчётах сумм
3. Деление на ноль невозможно (ValueError до вычисления)
4. Все операции детерминированы и воспроизводимы
"""

from typing import Final

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Знаменатель для basis points (1 bps = 1/10000)
BPS_DENOMINATOR: Final[int] = 10_000


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_amount(value: int, name: str = "amount") -> int:
    """
    Проверка, что сумма — неотрицательное целое.

    bool отклоняется явно: True/False не являются суммами.

    Raises:
        TypeError: Если значение не int
        ValueError: Если значение отрицательное
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative: {value}")
    return value


def validate_bps(bps: int, cap: int = BPS_DENOMINATOR, name: str = "bps") -> int:
    """
    Проверка ставки в basis points: 0 <= bps <= cap.

    Raises:
        ValueError: Если ставка вне диапазона
    """
    validate_amount(bps, name)
    if bps > cap:
        raise ValueError(f"{name} {bps} exceeds cap {cap}")
    return bps


# =============================================================================
# ОПЕРАЦИИ
# =============================================================================


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    floor(a * b / denominator) без промежуточного округления.

    Args:
        a: Первый множитель (>= 0)
        b: Второй множитель (>= 0)
        denominator: Делитель (> 0)

    Returns:
        Целая часть произведения, делённого на denominator

    Examples:
        >>> mul_div(50, 1000, 10_000)
        5
        >>> mul_div(7, 3, 2)
        10
    """
    validate_amount(a, "a")
    validate_amount(b, "b")
    if isinstance(denominator, bool) or not isinstance(denominator, int) or denominator <= 0:
        raise ValueError(f"denominator must be a positive int, got {denominator!r}")
    return (a * b) // denominator


def apply_bps(amount: int, bps: int) -> int:
    """
    Доля суммы в basis points: floor(amount * bps / 10000).

    Examples:
        >>> apply_bps(100, 500)
        5
        >>> apply_bps(9_999, 1)
        0
    """
    validate_bps(bps)
    return mul_div(amount, bps, BPS_DENOMINATOR)


def scale_up_bps(amount: int, bps: int) -> int:
    """
    Сумма с надбавкой: floor(amount * (10000 + bps) / 10000).

    Используется для bias stable-пула при сравнении котировок.

    Examples:
        >>> scale_up_bps(100_000_000, 10)
        100100000
    """
    validate_amount(bps, "bps")
    return mul_div(amount, BPS_DENOMINATOR + bps, BPS_DENOMINATOR)


def min_out_after_slippage(expected_out: int, slippage_bps: int) -> int:
    """
    Минимально допустимый выход свопа: floor(expected * (1 - slippage)).

    Examples:
        >>> min_out_after_slippage(1_000_000, 500)
        950000
    """
    validate_bps(slippage_bps, name="slippage_bps")
    return mul_div(expected_out, BPS_DENOMINATOR - slippage_bps, BPS_DENOMINATOR)


def sub_floor_zero(a: int, b: int) -> int:
    """
    Вычитание с полом в нуле: max(a - b, 0).

    Examples:
        >>> sub_floor_zero(1000, 1045)
        0
    """
    validate_amount(a, "a")
    validate_amount(b, "b")
    return a - b if a > b else 0
