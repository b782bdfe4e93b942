"""GATE 0: Access — проверка роли вызывающего

Первый gate перед каждой изменяющей состояние операцией.

Матрица доступа:
- owner: INITIAL_DEPOSIT, WITHDRAW, EMERGENCY_EXIT
- admin: MANUAL_REBALANCE, ADD_VENUE, REMOVE_VENUE, SET_FEE_POLICY, PAUSE, UNPAUSE
- owner или admin: PERIODIC_REBALANCE

Gate stateless: роли берутся из переданного VaultState.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from user_vault.core.domain.vault_state import Role, VaultState


class Operation(str, Enum):
    """Публичные изменяющие операции vault."""

    INITIAL_DEPOSIT = "INITIAL_DEPOSIT"
    PERIODIC_REBALANCE = "PERIODIC_REBALANCE"
    WITHDRAW = "WITHDRAW"
    MANUAL_REBALANCE = "MANUAL_REBALANCE"
    EMERGENCY_EXIT = "EMERGENCY_EXIT"
    ADD_VENUE = "ADD_VENUE"
    REMOVE_VENUE = "REMOVE_VENUE"
    SET_FEE_POLICY = "SET_FEE_POLICY"
    PAUSE = "PAUSE"
    UNPAUSE = "UNPAUSE"


OWNER_ONLY = frozenset({Role.OWNER})
ADMIN_ONLY = frozenset({Role.ADMIN})
OWNER_OR_ADMIN = frozenset({Role.OWNER, Role.ADMIN})

REQUIRED_ROLES: Mapping[Operation, frozenset[Role]] = {
    Operation.INITIAL_DEPOSIT: OWNER_ONLY,
    Operation.WITHDRAW: OWNER_ONLY,
    Operation.EMERGENCY_EXIT: OWNER_ONLY,
    Operation.PERIODIC_REBALANCE: OWNER_OR_ADMIN,
    Operation.MANUAL_REBALANCE: ADMIN_ONLY,
    Operation.ADD_VENUE: ADMIN_ONLY,
    Operation.REMOVE_VENUE: ADMIN_ONLY,
    Operation.SET_FEE_POLICY: ADMIN_ONLY,
    Operation.PAUSE: ADMIN_ONLY,
    Operation.UNPAUSE: ADMIN_ONLY,
}


@dataclass(frozen=True)
class AccessResult:
    """Результат GATE 0."""

    allowed: bool
    block_reason: str

    # Входные параметры для диагностики
    operation: Operation
    caller: str
    caller_roles: frozenset[Role]
    required_roles: frozenset[Role]

    details: str


class Gate00Access:
    """GATE 0: capability check по матрице ролей."""

    def evaluate(self, state: VaultState, caller: str, operation: Operation) -> AccessResult:
        """Оценка доступа вызывающего к операции.

        Args:
            state: текущий снапшот vault (owner/admin)
            caller: идентификатор вызывающего
            operation: запрашиваемая операция

        Returns:
            AccessResult с решением о допуске
        """
        roles = state.roles_of(caller)
        required = REQUIRED_ROLES[operation]

        if roles & required:
            return AccessResult(
                allowed=True,
                block_reason="",
                operation=operation,
                caller=caller,
                caller_roles=roles,
                required_roles=required,
                details=f"PASS: {caller} as {sorted(r.value for r in roles & required)}",
            )

        return AccessResult(
            allowed=False,
            block_reason="unauthorized",
            operation=operation,
            caller=caller,
            caller_roles=roles,
            required_roles=required,
            details=(
                f"{operation.value} requires one of {sorted(r.value for r in required)}, "
                f"caller {caller} has {sorted(r.value for r in roles)}"
            ),
        )
