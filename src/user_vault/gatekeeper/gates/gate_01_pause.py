"""GATE 1: Pause — глобальный kill-switch

Второй gate в цепочке (после GATE 0).
- paused: разрешены только EMERGENCY_EXIT и административные операции
  (whitelist, fee policy, pause/unpause)
- не paused: EMERGENCY_EXIT блокируется (emergency exit возможен только на паузе)
"""

from dataclasses import dataclass

from user_vault.gatekeeper.gates.gate_00_access import Operation

# Операции, не затронутые паузой
ADMINISTRATIVE_OPERATIONS = frozenset(
    {
        Operation.ADD_VENUE,
        Operation.REMOVE_VENUE,
        Operation.SET_FEE_POLICY,
        Operation.PAUSE,
        Operation.UNPAUSE,
    }
)


@dataclass(frozen=True)
class PauseResult:
    """Результат GATE 1."""

    allowed: bool
    block_reason: str

    operation: Operation
    paused: bool

    details: str


class Gate01Pause:
    """GATE 1: pause flag."""

    def evaluate(self, paused: bool, operation: Operation) -> PauseResult:
        """Оценка допуска операции при текущем pause flag."""
        if operation in ADMINISTRATIVE_OPERATIONS:
            return PauseResult(
                allowed=True,
                block_reason="",
                operation=operation,
                paused=paused,
                details=f"PASS: {operation.value} is administrative",
            )

        if operation == Operation.EMERGENCY_EXIT:
            if paused:
                return PauseResult(
                    allowed=True,
                    block_reason="",
                    operation=operation,
                    paused=paused,
                    details="PASS: emergency exit while paused",
                )
            return PauseResult(
                allowed=False,
                block_reason="not_paused",
                operation=operation,
                paused=paused,
                details="Emergency exit is permitted only while paused",
            )

        if paused:
            return PauseResult(
                allowed=False,
                block_reason="paused",
                operation=operation,
                paused=paused,
                details=f"Vault paused: {operation.value} blocked",
            )

        return PauseResult(
            allowed=True,
            block_reason="",
            operation=operation,
            paused=paused,
            details=f"PASS: {operation.value}",
        )
