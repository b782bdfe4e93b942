"""Unit тесты для AtomicExecutor.

Coverage:
- кодирование команды в пару (transfer, action)
- deposit / redeem потоки через intermediary
- полный откат batch при сбое второго шага
"""

import pytest

from user_vault.core.errors import ExecutionError, PolicyError, StateError
from user_vault.execution import AtomicExecutor, VaultAction, VaultCommand
from user_vault.sim import SimWorld
from user_vault.venues import BatchResult, CallKind

ACCOUNT = "vault"
USDC = "USDC"


@pytest.fixture
def world():
    w = SimWorld()
    w.add_vault("V1", USDC)
    w.chain.mint(USDC, ACCOUNT, 5_000_000_000)
    return w


@pytest.fixture
def executor(world):
    return AtomicExecutor(
        account=ACCOUNT,
        tokens=world.chain,
        vaults=world.chain,
        executor=world.multicall,
    )


class TestVaultCommand:
    def test_deposit_calls(self):
        command = VaultCommand(
            action=VaultAction.DEPOSIT, vault="V1", transfer_token=USDC, amount=10, beneficiary=ACCOUNT
        )

        transfer, act = command.to_calls("multicall")

        assert transfer.kind == CallKind.TRANSFER
        assert (transfer.target, transfer.sender, transfer.receiver) == (USDC, ACCOUNT, "multicall")
        assert act.kind == CallKind.VAULT_DEPOSIT
        assert (act.target, act.receiver, act.amount) == ("V1", ACCOUNT, 10)

    def test_redeem_transfers_share_token(self):
        command = VaultCommand(
            action=VaultAction.REDEEM, vault="V1", transfer_token="V1", amount=7, beneficiary=ACCOUNT
        )

        transfer, act = command.to_calls("multicall")

        assert transfer.target == "V1"
        assert act.kind == CallKind.VAULT_REDEEM


class TestDepositRedeem:
    def test_deposit_credits_shares(self, world, executor):
        receipt = executor.deposit("V1", 1_000_000_000)

        assert receipt.amount_out == 1_000_000_000
        assert world.chain.vault("V1").balance_of(ACCOUNT) == 1_000_000_000
        assert world.chain.balance_of(USDC, ACCOUNT) == 4_000_000_000
        # intermediary ничего не удерживает
        assert world.chain.balance_of(USDC, world.multicall.address) == 0
        assert world.chain.balance_of("V1", world.multicall.address) == 0

    def test_redeem_all_returns_assets_with_yield(self, world, executor):
        executor.deposit("V1", 1_000_000_000)
        world.chain.vault("V1").accrue_yield(50_000_000)

        receipt = executor.redeem_all("V1")

        assert receipt.amount_out == 1_050_000_000
        assert world.chain.vault("V1").balance_of(ACCOUNT) == 0
        assert world.chain.balance_of(USDC, ACCOUNT) == 5_050_000_000

    def test_one_batch_per_command(self, world, executor):
        executor.deposit("V1", 1_000)
        executor.redeem("V1", 400)

        assert len(world.multicall.batches) == 2
        assert all(len(batch) == 2 for batch in world.multicall.batches)

    def test_zero_deposit_rejected(self, executor):
        with pytest.raises(PolicyError):
            executor.deposit("V1", 0)

    def test_redeem_all_with_no_shares(self, executor):
        with pytest.raises(PolicyError) as exc_info:
            executor.redeem_all("V1")
        assert exc_info.value.reason == "zero_balance"

    def test_unknown_vault(self, executor):
        with pytest.raises(StateError) as exc_info:
            executor.deposit("V9", 10)
        assert exc_info.value.reason == "unknown_venue"


class TestAtomicity:
    def test_second_step_failure_rolls_back_transfer(self, world, executor):
        usdc_before = world.chain.balance_of(USDC, ACCOUNT)
        world.multicall.fail_at_step = 1

        with pytest.raises(ExecutionError) as exc_info:
            executor.deposit("V1", 1_000_000_000)

        assert exc_info.value.reason == "batch_failed"
        assert world.chain.balance_of(USDC, ACCOUNT) == usdc_before
        assert world.chain.balance_of(USDC, world.multicall.address) == 0
        assert world.chain.vault("V1").balance_of(ACCOUNT) == 0
        assert world.chain.rollbacks == 1

    def test_redeem_failure_keeps_shares(self, world, executor):
        executor.deposit("V1", 1_000_000_000)
        world.multicall.fail_at_step = 1

        with pytest.raises(ExecutionError):
            executor.redeem_all("V1")

        assert world.chain.vault("V1").balance_of(ACCOUNT) == 1_000_000_000
        assert world.chain.balance_of("V1", world.multicall.address) == 0

    def test_reported_failure_is_trusted(self, world, executor):
        class RejectingExecutor:
            address = "multicall"

            def multicall(self, calls):
                return BatchResult(success=False, failed_index=0, reason="rejected")

        executor.executor = RejectingExecutor()

        with pytest.raises(ExecutionError) as exc_info:
            executor.deposit("V1", 10)
        assert "rejected" in exc_info.value.details

    def test_executor_exception_wrapped(self, executor):
        class BrokenExecutor:
            address = "multicall"

            def multicall(self, calls):
                raise RuntimeError("rpc down")

        executor.executor = BrokenExecutor()

        with pytest.raises(ExecutionError) as exc_info:
            executor.deposit("V1", 10)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
