"""
Units — конверсия единиц base asset

Единственный допустимый способ преобразований между:
- base units (int, минимальные единицы токена, например 1 USDC = 1_000_000)
- display amount (Decimal, человекочитаемая сумма)

ЗАПРЕЩЕНО использовать float для сумм. Display amount нужен только для
конфигурации и логов.
"""

from decimal import ROUND_DOWN, Decimal
from typing import Final, Union

from user_vault.core.math.fixed_point import validate_amount


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Точность base asset по умолчанию (USDC)
BASE_ASSET_DECIMALS: Final[int] = 6

# Максимальная поддерживаемая точность токена
MAX_TOKEN_DECIMALS: Final[int] = 36


# =============================================================================
# КОНВЕРТЕРЫ
# =============================================================================


def _unit(decimals: int) -> Decimal:
    if decimals < 0 or decimals > MAX_TOKEN_DECIMALS:
        raise ValueError(f"decimals must be in [0, {MAX_TOKEN_DECIMALS}], got {decimals}")
    return Decimal(10) ** decimals


def to_base_units(
    amount: Union[str, int, Decimal], decimals: int = BASE_ASSET_DECIMALS
) -> int:
    """
    Конверсия: display amount → base units (floor).

    Args:
        amount: Сумма как строка, int или Decimal (например, "10.5")
        decimals: Точность токена

    Returns:
        Сумма в минимальных единицах токена

    Raises:
        TypeError: Если передан float
        ValueError: Если сумма отрицательная

    Examples:
        >>> to_base_units("10")
        10000000
        >>> to_base_units("0.0000019")
        1
    """
    if isinstance(amount, float):
        raise TypeError("float amounts are not accepted, pass str or Decimal")
    value = Decimal(amount)
    if value < 0:
        raise ValueError(f"amount cannot be negative: {amount}")
    scaled = (value * _unit(decimals)).quantize(Decimal(1), rounding=ROUND_DOWN)
    return int(scaled)


def from_base_units(amount: int, decimals: int = BASE_ASSET_DECIMALS) -> Decimal:
    """
    Конверсия: base units → display amount.

    Examples:
        >>> from_base_units(1_045_000_000)
        Decimal('1045')
    """
    validate_amount(amount)
    return Decimal(amount) / _unit(decimals)


def format_amount(amount: int, decimals: int = BASE_ASSET_DECIMALS) -> str:
    """Строковое представление суммы для логов."""
    return f"{from_base_units(amount, decimals):f}"
