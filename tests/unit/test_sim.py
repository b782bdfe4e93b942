"""Unit тесты для in-memory симуляции коллабораторов."""

from fractions import Fraction

import pytest

from user_vault.sim import SimChain, SimRevert, SimWorld
from user_vault.venues import BatchCall, CallKind, Route


class TestSimChain:
    def test_transaction_rolls_back_on_error(self):
        chain = SimChain()
        chain.mint("USDC", "a", 100)

        with pytest.raises(SimRevert):
            with chain.transaction():
                chain.transfer("USDC", "a", "b", 60)
                chain.transfer("USDC", "a", "b", 60)

        assert chain.balance_of("USDC", "a") == 100
        assert chain.balance_of("USDC", "b") == 0
        assert chain.rollbacks == 1

    def test_nested_transaction_rolls_back_independently(self):
        chain = SimChain()
        chain.mint("USDC", "a", 100)

        with chain.transaction():
            chain.transfer("USDC", "a", "b", 10)
            with pytest.raises(SimRevert):
                with chain.transaction():
                    chain.transfer("USDC", "a", "b", 10)
                    raise SimRevert("inner")

        assert chain.balance_of("USDC", "b") == 10

    def test_clock(self):
        chain = SimChain(start_ts=1_000)
        assert chain.advance(50) == 1_050
        with pytest.raises(ValueError):
            chain.advance(-1)


class TestSimVault:
    def test_exit_fee_in_preview_redeem(self):
        world = SimWorld()
        vault = world.add_vault("V1", "USDC", exit_fee_bps=100)
        world.chain.mint("USDC", "alice", 1_000)
        vault.deposit(1_000, receiver="alice", sender="alice")

        assert vault.convert_to_assets(1_000) == 1_000
        assert vault.preview_redeem(1_000) == 990

    def test_unknown_vault(self):
        with pytest.raises(KeyError):
            SimWorld().chain.vault("nope")


class TestSimLiquidity:
    def test_expired_deadline_reverts(self):
        world = SimWorld()
        world.add_pool("USDC", "DAI", stable=True, price=Fraction(1))
        world.chain.mint("USDC", "alice", 100)
        route = Route("USDC", "DAI", True, world.factory.address)

        with pytest.raises(SimRevert):
            world.router.swap_exact_tokens_for_tokens(
                100, 0, [route], "alice", world.chain.now() - 1, "alice"
            )

    def test_depth_limit_reverts_quote(self):
        world = SimWorld()
        world.add_pool("USDC", "DAI", stable=False, price=Fraction(1), max_amount_in=10)
        route = Route("USDC", "DAI", False, world.factory.address)

        assert world.router.get_amounts_out(10, [route]) == [10, 10]
        with pytest.raises(SimRevert):
            world.router.get_amounts_out(11, [route])


class TestSimMulticall:
    def test_failure_reports_index_and_rolls_back(self):
        world = SimWorld()
        world.chain.mint("USDC", "alice", 100)
        calls = [
            BatchCall(kind=CallKind.TRANSFER, target="USDC", amount=50, receiver="bob", sender="alice"),
            BatchCall(kind=CallKind.VAULT_DEPOSIT, target="missing", amount=50, receiver="alice"),
        ]

        result = world.multicall.multicall(calls)

        assert not result.success
        assert result.failed_index == 1
        assert world.chain.balance_of("USDC", "alice") == 100
