"""
Venue Interfaces — граница с внешними коллабораторами

typing.Protocol для всего, что vault потребляет извне:
- Chain: часы и транзакционный scope (rollback внешних эффектов при ошибке)
- TokenLedger: балансы и переводы токенов
- Vault / VaultProvider: ERC-4626 venue (asset, balanceOf, convertToAssets, previewRedeem)
- PoolFactory: поиск пула для пары (stable/volatile)
- LiquidityRouter: котировки и исполнение свопов
- BatchExecutor: атомарное исполнение упорядоченного списка вызовов

Ошибки внешних вызовов — любые исключения; ядро оборачивает их в
ExecutionError (кроме сравнительных котировок, см. SwapRouter).
"""

from dataclasses import dataclass
from enum import Enum
from typing import ContextManager, Optional, Protocol, Sequence


# =============================================================================
# CHAIN / TOKENS
# =============================================================================


class Chain(Protocol):
    """Часы и транзакционный scope."""

    def now(self) -> int:
        """Текущее время (Unix, секунды)."""
        ...

    def transaction(self) -> ContextManager[None]:
        """Scope, откатывающий все внешние эффекты при исключении."""
        ...


class TokenLedger(Protocol):
    """Балансы и переводы токенов (safe-transfer обёртки — на стороне реализации)."""

    def balance_of(self, token: str, holder: str) -> int:
        ...

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        ...


# =============================================================================
# VAULT VENUES
# =============================================================================


class Vault(Protocol):
    """Yield-bearing vault со стандартом deposit/redeem shares (ERC-4626)."""

    address: str

    def asset(self) -> str:
        """Адрес underlying asset."""
        ...

    def balance_of(self, holder: str) -> int:
        """Shares держателя."""
        ...

    def convert_to_assets(self, shares: int) -> int:
        ...

    def preview_redeem(self, shares: int) -> int:
        ...


class VaultProvider(Protocol):
    """Разрешение идентификатора venue в Vault."""

    def vault(self, address: str) -> Vault:
        """
        Raises:
            KeyError: Если venue неизвестен
        """
        ...


# =============================================================================
# LIQUIDITY VENUES
# =============================================================================


@dataclass(frozen=True)
class Route:
    """Один hop свопа через пул заданного стиля."""

    from_token: str
    to_token: str
    stable: bool
    factory: str


class PoolFactory(Protocol):
    address: str

    def get_pool(self, token_a: str, token_b: str, stable: bool) -> Optional[str]:
        """Адрес пула или None, если пула нет."""
        ...


class LiquidityRouter(Protocol):
    def get_amounts_out(self, amount_in: int, routes: Sequence[Route]) -> list[int]:
        """
        Ожидаемые суммы по маршруту [amount_in, ..., amount_out].

        Может бросить исключение при недостаточной глубине.
        """
        ...

    def swap_exact_tokens_for_tokens(
        self,
        amount_in: int,
        amount_out_min: int,
        routes: Sequence[Route],
        to: str,
        deadline: int,
        sender: str,
    ) -> list[int]:
        """
        Исполнение свопа; sender — аккаунт, чьи токены тратятся.

        Бросает исключение, если amount_out_min не достигнут или deadline истёк.
        """
        ...


# =============================================================================
# BATCH EXECUTION
# =============================================================================


class CallKind(str, Enum):
    """Вид вызова в atomic batch."""

    TRANSFER = "TRANSFER"
    VAULT_DEPOSIT = "VAULT_DEPOSIT"
    VAULT_REDEEM = "VAULT_REDEEM"


@dataclass(frozen=True)
class BatchCall:
    """
    Один вызов в упорядоченном списке multicall.

    TRANSFER: перевод `amount` токена `target` от `sender` к `receiver`.
    VAULT_DEPOSIT: intermediary вносит `amount` assets в vault `target`, shares → `receiver`.
    VAULT_REDEEM: intermediary гасит `amount` shares vault `target`, assets → `receiver`.
    """

    kind: CallKind
    target: str
    amount: int
    receiver: str
    sender: Optional[str] = None


@dataclass(frozen=True)
class BatchResult:
    """Исход multicall: всё или ничего."""

    success: bool
    failed_index: Optional[int] = None
    reason: str = ""


class BatchExecutor(Protocol):
    """Внешний механизм атомарного исполнения списка вызовов."""

    address: str

    def multicall(self, calls: Sequence[BatchCall]) -> BatchResult:
        ...
