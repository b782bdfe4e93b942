"""SimChain — in-memory chain для paper-режима и тестов

Реализует Chain, TokenLedger и VaultProvider:
- часы, управляемые вручную (advance)
- балансы токенов (включая shares vault, токен shares = адрес vault)
- transaction(): снапшот балансов и откат при любом исключении;
  вложенные транзакции откатываются независимо
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Dict, Iterator, Tuple

if TYPE_CHECKING:
    from user_vault.sim.vault import SimVault


class SimRevert(Exception):
    """Откат вызова в симуляции (аналог revert)."""


class SimChain:
    """Часы, балансы и реестр vault."""

    def __init__(self, start_ts: int = 1_700_000_000):
        self._now = start_ts
        self._balances: Dict[Tuple[str, str], int] = {}
        self._vaults: Dict[str, "SimVault"] = {}
        self.rollbacks = 0

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("time cannot go backwards")
        self._now += seconds
        return self._now

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = dict(self._balances)
        try:
            yield
        except BaseException:
            self._balances = snapshot
            self.rollbacks += 1
            raise

    # ------------------------------------------------------------------
    # TokenLedger
    # ------------------------------------------------------------------

    def balance_of(self, token: str, holder: str) -> int:
        return self._balances.get((token, holder), 0)

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise SimRevert(f"negative transfer {amount}")
        balance = self.balance_of(token, sender)
        if balance < amount:
            raise SimRevert(f"insufficient {token} balance for {sender}: {balance} < {amount}")
        self._balances[(token, sender)] = balance - amount
        self._balances[(token, recipient)] = self.balance_of(token, recipient) + amount

    def mint(self, token: str, holder: str, amount: int) -> None:
        if amount < 0:
            raise SimRevert(f"negative mint {amount}")
        self._balances[(token, holder)] = self.balance_of(token, holder) + amount

    def burn(self, token: str, holder: str, amount: int) -> None:
        balance = self.balance_of(token, holder)
        if amount < 0 or balance < amount:
            raise SimRevert(f"cannot burn {amount} {token} from {holder}")
        self._balances[(token, holder)] = balance - amount

    def total_supply(self, token: str) -> int:
        return sum(v for (t, _), v in self._balances.items() if t == token)

    # ------------------------------------------------------------------
    # VaultProvider
    # ------------------------------------------------------------------

    def register_vault(self, vault: "SimVault") -> None:
        self._vaults[vault.address] = vault

    def vault(self, address: str) -> "SimVault":
        return self._vaults[address]
