"""SwapRouter — конверсия asset A → asset B через лучший из двух пулов

Порядок:
1. Отклонение одинаковых токенов и нулевого входа
2. Поиск stable- и volatile-пула для пары
3. Ни одного пула → LiquidityError
4. Один пул → используется безусловно
5. Два пула → независимые котировки; упавшая котировка = 0 только для сравнения
6. stable-котировка умножается на (1 + bias) (0.1%); выбирается большее значение,
   при равенстве — stable
7. Исполнение на выбранном пуле с minOut = expected * (1 - slippage) и deadline

Выбранный пул с упавшей котировкой не исполняется: ExecutionError.
Read-only preview использует тот же выбор пула и котировки без свопа.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from user_vault.core.config import VaultConfig
from user_vault.core.errors import ExecutionError, LiquidityError, PolicyError
from user_vault.core.logging_utils import log_swap
from user_vault.core.math.fixed_point import min_out_after_slippage, scale_up_bps, validate_amount
from user_vault.venues.interfaces import Chain, LiquidityRouter, PoolFactory, Route

logger = logging.getLogger(__name__)


class QuoteStatus(str, Enum):
    """Состояние котировки пула."""

    NO_POOL = "NO_POOL"  # пула нет, ликвидности нет вообще
    OK = "OK"  # реальная котировка (может быть 0)
    FAILED = "FAILED"  # пул есть, котировка упала (недостаточная глубина)


@dataclass(frozen=True)
class PoolQuote:
    """Котировка одного пула с явным флагом существования."""

    stable: bool
    pool: Optional[str]
    status: QuoteStatus
    amount_out: int = 0

    @property
    def exists(self) -> bool:
        return self.status != QuoteStatus.NO_POOL

    @property
    def comparable_out(self) -> int:
        """Значение для сравнения: упавшая котировка считается нулём."""
        return self.amount_out if self.status == QuoteStatus.OK else 0


@dataclass(frozen=True)
class RouteDecision:
    """Результат выбора пула (детерминированный для одних и тех же котировок)."""

    token_in: str
    token_out: str
    amount_in: int

    stable_quote: PoolQuote
    volatile_quote: PoolQuote
    selected: PoolQuote

    # stable-котировка с bias (0 если stable-пула нет)
    biased_stable_out: int

    # "only_stable" | "only_volatile" | "stable_preferred" | "volatile_better"
    reason: str

    @property
    def expected_out(self) -> int:
        return self.selected.comparable_out


@dataclass(frozen=True)
class SwapResult:
    """Результат исполненного свопа."""

    decision: RouteDecision
    amount_out: int
    min_out: int
    deadline: int


class SwapRouter:
    """Конверсия через лучший из stable/volatile пулов под slippage bound.

    Котировки читаются один раз за операцию; повторного котирования нет.
    """

    def __init__(
        self,
        account: str,
        chain: Chain,
        factory: PoolFactory,
        router: LiquidityRouter,
        config: Optional[VaultConfig] = None,
    ):
        """
        Args:
            account: аккаунт позиции, чьи токены тратятся
            chain: часы для deadline
            factory: поиск пулов
            router: котировки и исполнение
            config: bias, slippage, deadline (default VaultConfig())
        """
        self.account = account
        self.chain = chain
        self.factory = factory
        self.router = router
        self.config = config or VaultConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def preview(self, token_in: str, token_out: str, amount_in: int) -> RouteDecision:
        """Read-only выбор пула и котировка без исполнения."""
        self._validate_request(token_in, token_out, amount_in)

        stable_quote = self._quote(token_in, token_out, amount_in, stable=True)
        volatile_quote = self._quote(token_in, token_out, amount_in, stable=False)
        return self._select(token_in, token_out, amount_in, stable_quote, volatile_quote)

    def preview_out(self, token_in: str, token_out: str, amount_in: int) -> int:
        """Ожидаемый выход для оценки стоимости; упавшая котировка выбранного пула — ошибка."""
        decision = self.preview(token_in, token_out, amount_in)
        self._require_executable(decision)
        return decision.expected_out

    def convert(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        recipient: Optional[str] = None,
    ) -> SwapResult:
        """
        Конверсия amount_in token_in в token_out.

        Raises:
            PolicyError: одинаковые токены или нулевой вход
            LiquidityError: нет ни одного пула
            ExecutionError: котировка выбранного пула упала, своп откатился,
                minOut не достигнут или deadline истёк
        """
        decision = self.preview(token_in, token_out, amount_in)
        self._require_executable(decision)

        expected_out = decision.expected_out
        min_out = min_out_after_slippage(expected_out, self.config.slippage_bps)
        deadline = self.chain.now() + self.config.swap_deadline_sec
        route = self._route(token_in, token_out, decision.selected.stable)

        log_swap(
            token_in,
            token_out,
            amount_in,
            expected_out,
            min_out,
            decision.selected.stable,
            extra={"reason": decision.reason},
        )

        try:
            amounts = self.router.swap_exact_tokens_for_tokens(
                amount_in,
                min_out,
                [route],
                recipient or self.account,
                deadline,
                self.account,
            )
        except Exception as exc:
            raise ExecutionError(
                "swap_failed",
                f"{token_in}->{token_out} amount_in={amount_in} min_out={min_out}: {exc}",
            ) from exc

        if not amounts:
            raise ExecutionError("swap_failed", "router returned no amounts")
        amount_out = amounts[-1]
        if amount_out < min_out:
            raise ExecutionError(
                "min_out_not_met", f"amount_out={amount_out} < min_out={min_out}"
            )

        return SwapResult(decision=decision, amount_out=amount_out, min_out=min_out, deadline=deadline)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate_request(self, token_in: str, token_out: str, amount_in: int) -> None:
        if token_in == token_out:
            raise PolicyError("identical_tokens", f"cannot swap {token_in} to itself")
        validate_amount(amount_in, "amount_in")
        if amount_in == 0:
            raise PolicyError("zero_amount", "swap amount_in must be positive")

    def _route(self, token_in: str, token_out: str, stable: bool) -> Route:
        return Route(from_token=token_in, to_token=token_out, stable=stable, factory=self.factory.address)

    def _quote(self, token_in: str, token_out: str, amount_in: int, stable: bool) -> PoolQuote:
        pool = self.factory.get_pool(token_in, token_out, stable)
        if pool is None:
            return PoolQuote(stable=stable, pool=None, status=QuoteStatus.NO_POOL)

        try:
            amounts = self.router.get_amounts_out(amount_in, [self._route(token_in, token_out, stable)])
        except Exception as exc:
            # Недостаточная глубина, не сломанный venue
            logger.debug(
                "quote_failed pool=%s stable=%s amount_in=%s error=%r", pool, stable, amount_in, exc
            )
            return PoolQuote(stable=stable, pool=pool, status=QuoteStatus.FAILED)

        if not amounts:
            return PoolQuote(stable=stable, pool=pool, status=QuoteStatus.FAILED)
        return PoolQuote(stable=stable, pool=pool, status=QuoteStatus.OK, amount_out=amounts[-1])

    def _select(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        stable_quote: PoolQuote,
        volatile_quote: PoolQuote,
    ) -> RouteDecision:
        if not stable_quote.exists and not volatile_quote.exists:
            raise LiquidityError("no_pool", f"no stable or volatile pool for {token_in}/{token_out}")

        biased_stable_out = 0
        if stable_quote.exists:
            biased_stable_out = scale_up_bps(stable_quote.comparable_out, self.config.stable_bias_bps)

        if stable_quote.exists and not volatile_quote.exists:
            selected, reason = stable_quote, "only_stable"
        elif volatile_quote.exists and not stable_quote.exists:
            selected, reason = volatile_quote, "only_volatile"
        elif biased_stable_out >= volatile_quote.comparable_out:
            selected, reason = stable_quote, "stable_preferred"
        else:
            selected, reason = volatile_quote, "volatile_better"

        return RouteDecision(
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            stable_quote=stable_quote,
            volatile_quote=volatile_quote,
            selected=selected,
            biased_stable_out=biased_stable_out,
            reason=reason,
        )

    def _require_executable(self, decision: RouteDecision) -> None:
        selected = decision.selected
        if selected.status != QuoteStatus.OK:
            raise ExecutionError(
                "quote_failed",
                f"selected {'stable' if selected.stable else 'volatile'} pool {selected.pool} "
                f"could not quote {decision.amount_in} {decision.token_in}",
            )
        if selected.amount_out == 0:
            raise ExecutionError(
                "zero_quote", f"selected pool {selected.pool} quotes zero output"
            )
