"""Unit тесты для SwapRouter.

Coverage:
- выбор пула: stable iff stable * 1.001 >= volatile
- единственный пул используется безусловно
- нет пулов → LiquidityError
- упавшая котировка = 0 только для сравнения; исполнение на ней запрещено
- minOut (5%) и deadline (5 минут) при исполнении
- отклонение одинаковых токенов и нулевого входа
"""

from fractions import Fraction

import pytest

from user_vault.core.config import VaultConfig
from user_vault.core.errors import ExecutionError, LiquidityError, PolicyError
from user_vault.routing import QuoteStatus, SwapRouter
from user_vault.sim import SimWorld

ACCOUNT = "vault"
USDC = "USDC"
DAI = "DAI"
AMOUNT_IN = 100_000_000


@pytest.fixture
def world():
    w = SimWorld()
    w.chain.mint(USDC, ACCOUNT, 10 * AMOUNT_IN)
    return w


@pytest.fixture
def router(world):
    return SwapRouter(
        account=ACCOUNT,
        chain=world.chain,
        factory=world.factory,
        router=world.router,
        config=VaultConfig(),
    )


# =============================================================================
# POOL SELECTION
# =============================================================================


class TestPoolSelection:
    def test_stable_wins_within_bias(self, world, router):
        """stable=100, volatile=99.8 → biased stable 100.1 >= 99.8 → stable."""
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1))
        world.add_pool(USDC, DAI, stable=False, price=Fraction(998, 1000))

        decision = router.preview(USDC, DAI, AMOUNT_IN)

        assert decision.stable_quote.amount_out == 100_000_000
        assert decision.volatile_quote.amount_out == 99_800_000
        assert decision.biased_stable_out == 100_100_000
        assert decision.selected.stable is True
        assert decision.reason == "stable_preferred"

    def test_volatile_wins_outside_bias(self, world, router):
        """stable=99.8, volatile=100 → biased stable 99.9 < 100 → volatile."""
        world.add_pool(USDC, DAI, stable=True, price=Fraction(998, 1000))
        world.add_pool(USDC, DAI, stable=False, price=Fraction(1))

        decision = router.preview(USDC, DAI, AMOUNT_IN)

        assert decision.biased_stable_out == 99_899_800
        assert decision.selected.stable is False
        assert decision.reason == "volatile_better"
        assert decision.expected_out == 100_000_000

    def test_exact_tie_after_bias_goes_to_stable(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1))
        world.add_pool(USDC, DAI, stable=False, price=Fraction(1001, 1000))

        decision = router.preview(USDC, DAI, AMOUNT_IN)

        assert decision.biased_stable_out == decision.volatile_quote.amount_out
        assert decision.selected.stable is True

    def test_only_volatile_used_regardless_of_quote(self, world, router):
        world.add_pool(USDC, DAI, stable=False, price=Fraction(1, 2))

        decision = router.preview(USDC, DAI, AMOUNT_IN)

        assert decision.stable_quote.status == QuoteStatus.NO_POOL
        assert decision.selected.stable is False
        assert decision.reason == "only_volatile"
        assert decision.expected_out == 50_000_000

    def test_only_stable_used(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1, 3))

        decision = router.preview(USDC, DAI, AMOUNT_IN)

        assert decision.reason == "only_stable"
        assert decision.selected.stable is True

    def test_no_pool_is_liquidity_error(self, router):
        with pytest.raises(LiquidityError) as exc_info:
            router.preview(USDC, DAI, AMOUNT_IN)
        assert exc_info.value.reason == "no_pool"

    def test_reverse_direction_uses_same_pool(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(2))

        assert router.preview_out(DAI, USDC, AMOUNT_IN) == 50_000_000

    def test_preview_does_not_trade(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1))

        router.preview(USDC, DAI, AMOUNT_IN)

        assert world.router.swaps == []
        assert world.chain.balance_of(USDC, ACCOUNT) == 10 * AMOUNT_IN


# =============================================================================
# FAILED QUOTES
# =============================================================================


class TestFailedQuotes:
    def test_failed_stable_quote_counts_as_zero(self, world, router):
        """Недостаточная глубина stable-пула: котировка 0 только для сравнения."""
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1), max_amount_in=AMOUNT_IN - 1)
        world.add_pool(USDC, DAI, stable=False, price=Fraction(9, 10))

        decision = router.preview(USDC, DAI, AMOUNT_IN)

        assert decision.stable_quote.status == QuoteStatus.FAILED
        assert decision.stable_quote.exists
        assert decision.stable_quote.comparable_out == 0
        assert decision.selected.stable is False

    def test_failed_quote_distinct_from_missing_pool(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1), max_amount_in=1)

        decision = router.preview(USDC, DAI, AMOUNT_IN)

        assert decision.stable_quote.status == QuoteStatus.FAILED
        assert decision.volatile_quote.status == QuoteStatus.NO_POOL

    def test_selected_failed_quote_is_never_executed(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1), max_amount_in=1)

        with pytest.raises(ExecutionError) as exc_info:
            router.convert(USDC, DAI, AMOUNT_IN)

        assert exc_info.value.reason == "quote_failed"
        assert world.router.swaps == []

    def test_both_quotes_failed(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1), max_amount_in=1)
        world.add_pool(USDC, DAI, stable=False, price=Fraction(1), max_amount_in=1)

        with pytest.raises(ExecutionError) as exc_info:
            router.convert(USDC, DAI, AMOUNT_IN)
        assert exc_info.value.reason == "quote_failed"

    def test_zero_quote_rejected(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1, 10**12))

        with pytest.raises(ExecutionError) as exc_info:
            router.convert(USDC, DAI, AMOUNT_IN)
        assert exc_info.value.reason == "zero_quote"


# =============================================================================
# EXECUTION
# =============================================================================


class TestConvert:
    def test_convert_moves_balances(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1))

        result = router.convert(USDC, DAI, AMOUNT_IN)

        assert result.amount_out == AMOUNT_IN
        assert result.min_out == 95_000_000
        assert world.chain.balance_of(DAI, ACCOUNT) == AMOUNT_IN
        assert world.chain.balance_of(USDC, ACCOUNT) == 9 * AMOUNT_IN

    def test_deadline_is_five_minutes(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1))

        result = router.convert(USDC, DAI, AMOUNT_IN)

        assert result.deadline == world.chain.now() + 300
        assert world.router.swaps[-1].deadline == result.deadline
        assert world.router.swaps[-1].amount_out_min == result.min_out

    def test_execution_within_slippage(self, world, router):
        pool = world.add_pool(USDC, DAI, stable=True, price=Fraction(1))
        pool.execution_haircut_bps = 400

        result = router.convert(USDC, DAI, AMOUNT_IN)

        assert result.amount_out == 96_000_000

    def test_min_out_not_met_fails_atomically(self, world, router):
        pool = world.add_pool(USDC, DAI, stable=True, price=Fraction(1))
        pool.execution_haircut_bps = 600

        with pytest.raises(ExecutionError) as exc_info:
            router.convert(USDC, DAI, AMOUNT_IN)

        assert exc_info.value.reason == "swap_failed"
        assert world.chain.balance_of(USDC, ACCOUNT) == 10 * AMOUNT_IN
        assert world.chain.balance_of(DAI, ACCOUNT) == 0

    def test_recipient_override(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1))

        router.convert(USDC, DAI, AMOUNT_IN, recipient="someone")

        assert world.chain.balance_of(DAI, "someone") == AMOUNT_IN


class TestRequestValidation:
    def test_identical_tokens(self, router):
        with pytest.raises(PolicyError) as exc_info:
            router.convert(USDC, USDC, AMOUNT_IN)
        assert exc_info.value.reason == "identical_tokens"

    def test_zero_amount(self, world, router):
        world.add_pool(USDC, DAI, stable=True, price=Fraction(1))
        with pytest.raises(PolicyError) as exc_info:
            router.convert(USDC, DAI, 0)
        assert exc_info.value.reason == "zero_amount"
