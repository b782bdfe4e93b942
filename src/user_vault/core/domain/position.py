"""
Position — модель позиции vault

Immutable Pydantic модель. Все изменения позиции создают новый экземпляр
через методы with_*; ledger присваивает новый снапшот только после успешного
завершения всех внешних вызовов.

Principal всегда хранится в единицах base asset, никогда в shares venue.
"""

from typing import Optional

from pydantic import BaseModel, Field

from user_vault.core.math.fixed_point import sub_floor_zero


class Position(BaseModel):
    """
    Модель позиции.

    Создаётся неинициализированной, никогда не уничтожается. После полного
    вывода principal может вернуться к нулю, позиция остаётся initialized.
    """

    principal: int = Field(0, ge=0, description="Principal в base units base asset")
    current_venue: Optional[str] = Field(
        None, min_length=1, description="Активный venue (None до первого депозита)"
    )
    initialized: bool = Field(False, description="Первый депозит выполнен")
    last_rebalance_ts: Optional[int] = Field(
        None, ge=0, description="Время последнего rebalance (Unix, секунды; None = никогда)"
    )

    model_config = {"frozen": True}

    def with_deposit(self, venue: str, amount: int, now_ts: int) -> "Position":
        """Позиция после депозита: principal += amount, venue активен."""
        return self.model_copy(
            update={
                "principal": self.principal + amount,
                "current_venue": venue,
                "initialized": True,
                "last_rebalance_ts": now_ts,
            }
        )

    def with_venue(self, venue: str, now_ts: Optional[int] = None) -> "Position":
        """Позиция после перевода средств в другой venue (principal без изменений)."""
        update: dict = {"current_venue": venue}
        if now_ts is not None:
            update["last_rebalance_ts"] = now_ts
        return self.model_copy(update=update)

    def with_rebalance_ts(self, now_ts: int) -> "Position":
        """Обновление только timestamp (rebalance в тот же venue)."""
        return self.model_copy(update={"last_rebalance_ts": now_ts})

    def with_redeemed(self, redeemed_amount: int) -> "Position":
        """Principal после вывода: principal - redeemed, с полом в нуле."""
        return self.model_copy(
            update={"principal": sub_floor_zero(self.principal, redeemed_amount)}
        )

    def with_zero_principal(self) -> "Position":
        """Позиция после emergency exit."""
        return self.model_copy(update={"principal": 0})

    def cooldown_remaining(self, now_ts: int, cooldown_sec: int) -> int:
        """
        Секунды до следующего разрешённого periodic rebalance.

        Returns:
            0 если rebalance ни разу не выполнялся или cooldown истёк
        """
        if self.last_rebalance_ts is None:
            return 0
        return max(self.last_rebalance_ts + cooldown_sec - now_ts, 0)
