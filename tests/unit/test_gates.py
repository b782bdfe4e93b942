"""Unit тесты для GATE 0 (access) и GATE 1 (pause).

Coverage:
- матрица ролей owner / admin / owner-or-admin
- посторонний вызывающий блокируется
- pause блокирует экономические операции, emergency exit только на паузе
- административные операции не затронуты паузой
"""

import pytest

from user_vault.core.domain import FeePolicy, Role, VaultState, VenueWhitelist
from user_vault.gatekeeper import Gate00Access, Gate01Pause, Operation


@pytest.fixture
def state():
    return VaultState(
        owner="owner",
        admin="admin",
        base_asset="USDC",
        whitelist=VenueWhitelist(venues=("V1",)),
        fee_policy=FeePolicy(rate_bps=100, min_profit_threshold=0, recipient="treasury"),
    )


@pytest.fixture
def gate00():
    return Gate00Access()


@pytest.fixture
def gate01():
    return Gate01Pause()


# =============================================================================
# GATE 0
# =============================================================================


class TestGate00Access:
    @pytest.mark.parametrize(
        "operation", [Operation.INITIAL_DEPOSIT, Operation.WITHDRAW, Operation.EMERGENCY_EXIT]
    )
    def test_owner_only(self, gate00, state, operation):
        assert gate00.evaluate(state, "owner", operation).allowed
        result = gate00.evaluate(state, "admin", operation)
        assert not result.allowed
        assert result.block_reason == "unauthorized"

    @pytest.mark.parametrize(
        "operation",
        [
            Operation.MANUAL_REBALANCE,
            Operation.ADD_VENUE,
            Operation.REMOVE_VENUE,
            Operation.SET_FEE_POLICY,
            Operation.PAUSE,
            Operation.UNPAUSE,
        ],
    )
    def test_admin_only(self, gate00, state, operation):
        assert gate00.evaluate(state, "admin", operation).allowed
        assert not gate00.evaluate(state, "owner", operation).allowed

    def test_periodic_rebalance_owner_or_admin(self, gate00, state):
        assert gate00.evaluate(state, "owner", Operation.PERIODIC_REBALANCE).allowed
        assert gate00.evaluate(state, "admin", Operation.PERIODIC_REBALANCE).allowed

    @pytest.mark.parametrize("operation", list(Operation))
    def test_stranger_blocked_everywhere(self, gate00, state, operation):
        result = gate00.evaluate(state, "mallory", operation)
        assert not result.allowed
        assert result.caller_roles == frozenset({Role.PUBLIC})

    def test_owner_and_admin_same_address(self, gate00, state):
        both = state.model_copy(update={"admin": "owner"})
        assert gate00.evaluate(both, "owner", Operation.MANUAL_REBALANCE).allowed
        assert gate00.evaluate(both, "owner", Operation.WITHDRAW).allowed

    def test_result_carries_diagnostics(self, gate00, state):
        result = gate00.evaluate(state, "owner", Operation.PAUSE)
        assert result.required_roles == frozenset({Role.ADMIN})
        assert "PAUSE" in result.details


# =============================================================================
# GATE 1
# =============================================================================


class TestGate01Pause:
    @pytest.mark.parametrize(
        "operation",
        [
            Operation.INITIAL_DEPOSIT,
            Operation.PERIODIC_REBALANCE,
            Operation.WITHDRAW,
            Operation.MANUAL_REBALANCE,
        ],
    )
    def test_paused_blocks_economic_operations(self, gate01, operation):
        result = gate01.evaluate(True, operation)
        assert not result.allowed
        assert result.block_reason == "paused"
        assert gate01.evaluate(False, operation).allowed

    def test_emergency_exit_only_while_paused(self, gate01):
        assert gate01.evaluate(True, Operation.EMERGENCY_EXIT).allowed
        result = gate01.evaluate(False, Operation.EMERGENCY_EXIT)
        assert not result.allowed
        assert result.block_reason == "not_paused"

    @pytest.mark.parametrize(
        "operation",
        [Operation.ADD_VENUE, Operation.REMOVE_VENUE, Operation.SET_FEE_POLICY, Operation.UNPAUSE],
    )
    def test_administrative_operations_pass_while_paused(self, gate01, operation):
        assert gate01.evaluate(True, operation).allowed
