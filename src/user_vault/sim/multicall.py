"""SimMulticall - атомарный BatchExecutor поверх SimChain.

Исполняет вызовы по порядку внутри chain.transaction(); первый упавший
вызов откатывает весь batch и возвращает BatchResult(success=False).
"""

from typing import List, Optional, Sequence, Tuple

from user_vault.sim.chain import SimChain, SimRevert
from user_vault.venues.interfaces import BatchCall, BatchResult, CallKind


class SimMulticall:
    def __init__(self, chain: SimChain, address: str = "multicall"):
        self.chain = chain
        self.address = address
        self.batches: List[Tuple[BatchCall, ...]] = []
        # Инъекция сбоя: индекс шага, который упадёт в следующем batch
        self.fail_at_step: Optional[int] = None

    def multicall(self, calls: Sequence[BatchCall]) -> BatchResult:
        self.batches.append(tuple(calls))
        fail_at, self.fail_at_step = self.fail_at_step, None

        index = 0
        try:
            with self.chain.transaction():
                for index, call in enumerate(calls):
                    if fail_at == index:
                        raise SimRevert(f"injected failure at step {index}")
                    self._execute(call)
        except SimRevert as exc:
            return BatchResult(success=False, failed_index=index, reason=str(exc))
        return BatchResult(success=True)

    def _execute(self, call: BatchCall) -> None:
        if call.kind == CallKind.TRANSFER:
            self.chain.transfer(call.target, call.sender or self.address, call.receiver, call.amount)
        elif call.kind == CallKind.VAULT_DEPOSIT:
            self._vault(call.target).deposit(call.amount, call.receiver, sender=self.address)
        elif call.kind == CallKind.VAULT_REDEEM:
            self._vault(call.target).redeem(call.amount, call.receiver, owner=self.address)
        else:
            raise SimRevert(f"unsupported call kind {call.kind}")

    def _vault(self, address: str):
        try:
            return self.chain.vault(address)
        except KeyError as exc:
            raise SimRevert(f"unknown vault {address}") from exc
