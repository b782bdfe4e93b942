"""
FeeEngine — комиссия только с прибыли

Чистая функция без побочных эффектов, безопасна для preview.

Правила:
- settlement <= principal → комиссии нет (убыток и break-even не облагаются)
- profit = settlement - principal
- profit <= min_profit_threshold → комиссии нет
- иначе fee = floor(profit * rate_bps / 10000), net = settlement - fee

Гарантии:
- fee <= profit всегда (principal никогда не облагается)
- fee монотонно не убывает по profit при фиксированной ставке
"""

from dataclasses import dataclass

from user_vault.core.math.fixed_point import apply_bps, validate_amount, validate_bps


@dataclass(frozen=True)
class FeeSplit:
    """Разделение settlement на комиссию и выплату."""

    settlement: int
    principal: int
    profit: int
    fee: int
    net: int
    rate_bps: int

    @property
    def charged(self) -> bool:
        return self.fee > 0


def fee_split(
    settlement: int,
    principal: int,
    rate_bps: int,
    min_profit_threshold: int = 0,
) -> FeeSplit:
    """
    Вычисление (fee, net) для settlement против principal.

    Args:
        settlement: Стоимость в base asset, полученная при выводе
        principal: Отслеживаемый principal в base asset
        rate_bps: Ставка комиссии (0..10000)
        min_profit_threshold: Прибыль <= порога не облагается

    Returns:
        FeeSplit

    Examples:
        >>> fee_split(1050, 1000, 1000, 10).fee
        5
        >>> fee_split(1005, 1000, 1000, 10).fee
        0
    """
    validate_amount(settlement, "settlement")
    validate_amount(principal, "principal")
    validate_bps(rate_bps, name="rate_bps")
    validate_amount(min_profit_threshold, "min_profit_threshold")

    if settlement <= principal:
        return FeeSplit(settlement, principal, 0, 0, settlement, rate_bps)

    profit = settlement - principal
    if profit <= min_profit_threshold:
        return FeeSplit(settlement, principal, profit, 0, settlement, rate_bps)

    fee = apply_bps(profit, rate_bps)
    return FeeSplit(settlement, principal, profit, fee, settlement - fee, rate_bps)
