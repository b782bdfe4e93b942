"""AtomicExecutor — пара (transfer, action) против vault одним неделимым batch

Два канонических потока:
- DEPOSIT: перевод `amount` asset vault intermediary → intermediary вносит в vault,
  shares зачисляются позиции (потолок цены не проверяется)
- REDEEM: перевод `shares` intermediary → intermediary гасит shares,
  assets зачисляются позиции (пол цены не проверяется; защита цены — slippage
  в SwapRouter)

Гарантия: оба шага успешны или batch откатывается целиком. Компонент доверяет
исходу, сообщённому BatchExecutor; при неуспехе бросает ExecutionError, и
ledger остаётся нетронутым (записи ledger происходят только после успеха).
"""

from dataclasses import dataclass
from enum import Enum

from user_vault.core.errors import ExecutionError, PolicyError, StateError
from user_vault.core.logging_utils import log_batch
from user_vault.venues.interfaces import (
    BatchCall,
    BatchExecutor,
    CallKind,
    TokenLedger,
    Vault,
    VaultProvider,
)


class VaultAction(str, Enum):
    DEPOSIT = "DEPOSIT"
    REDEEM = "REDEEM"


@dataclass(frozen=True)
class VaultCommand:
    """Транзакционная команда: семантическая пара (transfer, action).

    Кодирование в список вызовов — только в to_calls().
    """

    action: VaultAction
    vault: str
    transfer_token: str  # asset vault для DEPOSIT, share token (= vault) для REDEEM
    amount: int
    beneficiary: str

    def to_calls(self, intermediary: str) -> list[BatchCall]:
        transfer = BatchCall(
            kind=CallKind.TRANSFER,
            target=self.transfer_token,
            amount=self.amount,
            receiver=intermediary,
            sender=self.beneficiary,
        )
        kind = CallKind.VAULT_DEPOSIT if self.action == VaultAction.DEPOSIT else CallKind.VAULT_REDEEM
        act = BatchCall(kind=kind, target=self.vault, amount=self.amount, receiver=self.beneficiary)
        return [transfer, act]


@dataclass(frozen=True)
class ExecutionReceipt:
    """Результат batch: amount_out — shares (DEPOSIT) или assets (REDEEM), зачисленные позиции."""

    command: VaultCommand
    amount_out: int


class AtomicExecutor:
    """Атомарные deposit/redeem через внедрённый BatchExecutor."""

    def __init__(
        self,
        account: str,
        tokens: TokenLedger,
        vaults: VaultProvider,
        executor: BatchExecutor,
    ):
        self.account = account
        self.tokens = tokens
        self.vaults = vaults
        self.executor = executor

    def deposit(self, vault_address: str, amount: int) -> ExecutionReceipt:
        """Atomic deposit `amount` asset vault; возвращает полученные shares."""
        if amount <= 0:
            raise PolicyError("zero_amount", f"deposit into {vault_address} requires a positive amount")
        vault = self._vault(vault_address)
        command = VaultCommand(
            action=VaultAction.DEPOSIT,
            vault=vault_address,
            transfer_token=vault.asset(),
            amount=amount,
            beneficiary=self.account,
        )
        return self.submit(command)

    def redeem(self, vault_address: str, shares: int) -> ExecutionReceipt:
        """Atomic redeem `shares`; возвращает полученные assets."""
        if shares <= 0:
            raise PolicyError("zero_balance", f"no shares to redeem from {vault_address}")
        command = VaultCommand(
            action=VaultAction.REDEEM,
            vault=vault_address,
            transfer_token=vault_address,
            amount=shares,
            beneficiary=self.account,
        )
        return self.submit(command)

    def redeem_all(self, vault_address: str) -> ExecutionReceipt:
        """Atomic redeem всех shares позиции."""
        return self.redeem(vault_address, self._vault(vault_address).balance_of(self.account))

    def submit(self, command: VaultCommand) -> ExecutionReceipt:
        """Исполнение команды одним batch; amount_out — по дельте баланса позиции."""
        vault = self._vault(command.vault)
        balance_before = self._credited_balance(command, vault)

        try:
            result = self.executor.multicall(command.to_calls(self.executor.address))
        except Exception as exc:
            raise ExecutionError(
                "batch_failed", f"{command.action.value} {command.vault} amount={command.amount}: {exc}"
            ) from exc

        if not result.success:
            raise ExecutionError(
                "batch_failed",
                f"{command.action.value} {command.vault} amount={command.amount} "
                f"failed at step {result.failed_index}: {result.reason}",
            )

        amount_out = self._credited_balance(command, vault) - balance_before
        log_batch(command.action.value, command.vault, command.amount, amount_out)
        return ExecutionReceipt(command=command, amount_out=amount_out)

    def _vault(self, vault_address: str) -> Vault:
        try:
            return self.vaults.vault(vault_address)
        except KeyError as exc:
            raise StateError("unknown_venue", f"venue {vault_address} cannot be resolved") from exc

    def _credited_balance(self, command: VaultCommand, vault: Vault) -> int:
        if command.action == VaultAction.DEPOSIT:
            return vault.balance_of(self.account)
        return self.tokens.balance_of(vault.asset(), self.account)
