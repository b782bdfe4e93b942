"""PositionLedger — state machine позиции vault

Состояния: UNINITIALIZED → ACTIVE; pause — ортогональный флаг (GATE 1).

Операции:
- initial_deposit: первый депозит >= минимума инициализирует позицию;
  смена venue переносит средства из прежнего venue
- periodic_rebalance: перевод в целевой venue с cooldown; тот же venue —
  только обновление timestamp
- withdraw: вывод из активного venue, комиссия только с прибыли над principal
- manual_rebalance (admin): перевод с отдельной повышенной комиссией с прибыли,
  principal без изменений
- emergency_exit: только на паузе, полный вывод, principal → 0

Каждая операция:
1. NonReentrantGuard на всю операцию
2. GATE 0 (access) → GATE 1 (pause)
3. Тело внутри chain.transaction(): все внешние вызовы
4. Новый VaultState присваивается только после успеха всех внешних вызовов
5. События публикуются только после commit
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from user_vault.core.config import VaultConfig
from user_vault.core.domain.events import (
    Deposited,
    EmergencyExited,
    FeeCharged,
    FeePolicyUpdated,
    ManuallyRebalanced,
    PauseChanged,
    Rebalanced,
    Swapped,
    VaultEvent,
    VenueAdded,
    VenueRemoved,
    Withdrawn,
)
from user_vault.core.domain.position import Position
from user_vault.core.domain.vault_state import (
    FeePolicy,
    VaultState,
    VaultStatus,
    VenueWhitelist,
)
from user_vault.core.errors import (
    AuthorizationError,
    ExecutionError,
    PolicyError,
    StateError,
    VaultError,
)
from user_vault.core.logging_utils import log_event, log_gate_block
from user_vault.execution.atomic_executor import AtomicExecutor
from user_vault.fees.fee_engine import FeeSplit, fee_split
from user_vault.gatekeeper.gates.gate_00_access import Gate00Access, Operation
from user_vault.gatekeeper.gates.gate_01_pause import Gate01Pause
from user_vault.ledger.event_log import EventLog, EventSink
from user_vault.ledger.guard import NonReentrantGuard
from user_vault.routing.swap_router import SwapRouter
from user_vault.venues.interfaces import (
    BatchExecutor,
    Chain,
    LiquidityRouter,
    PoolFactory,
    TokenLedger,
    Vault,
    VaultProvider,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Collaborators:
    """Внешние коллабораторы одного экземпляра vault."""

    chain: Chain
    tokens: TokenLedger
    vaults: VaultProvider
    factory: PoolFactory
    router: LiquidityRouter
    batch_executor: BatchExecutor


class PositionLedger:
    """Single-owner custodial position manager."""

    def __init__(
        self,
        account: str,
        owner: str,
        admin: str,
        base_asset: str,
        venues: Sequence[str],
        fee_recipient: str,
        collaborators: Collaborators,
        config: Optional[VaultConfig] = None,
        event_sink: Optional[EventSink] = None,
    ):
        """
        Args:
            account: адрес, на котором vault держит средства
            owner: владелец позиции
            admin: администратор
            base_asset: токен учёта principal и комиссий
            venues: начальный whitelist
            fee_recipient: получатель комиссий
            collaborators: внешние коллабораторы
            config: статическая конфигурация (default VaultConfig())
            event_sink: получатель событий (default EventLog())
        """
        self.account = account
        self.config = config or VaultConfig()
        self.collaborators = collaborators
        self.chain = collaborators.chain
        self.tokens = collaborators.tokens
        self.vaults = collaborators.vaults
        self.event_sink: EventSink = event_sink if event_sink is not None else EventLog()

        self.swap_router = SwapRouter(
            account=account,
            chain=collaborators.chain,
            factory=collaborators.factory,
            router=collaborators.router,
            config=self.config,
        )
        self.executor = AtomicExecutor(
            account=account,
            tokens=collaborators.tokens,
            vaults=collaborators.vaults,
            executor=collaborators.batch_executor,
        )

        self._access_gate = Gate00Access()
        self._pause_gate = Gate01Pause()
        self._guard = NonReentrantGuard()

        for venue in venues:
            self._require_resolvable(venue)

        try:
            self._state = VaultState(
                owner=owner,
                admin=admin,
                base_asset=base_asset,
                whitelist=VenueWhitelist(venues=tuple(venues)),
                fee_policy=FeePolicy(
                    rate_bps=self.config.fee_rate_bps,
                    max_rate_bps=self.config.max_fee_rate_bps,
                    min_profit_threshold=self.config.min_profit_threshold,
                    recipient=fee_recipient,
                ),
            )
        except ValueError as e:
            raise PolicyError("invalid_setup", str(e)) from e

    # =========================================================================
    # ECONOMIC OPERATIONS
    # =========================================================================

    def initial_deposit(self, caller: str, venue: str, amount: int) -> Position:
        """Депозит `amount` base asset в `venue`.

        Первый депозит требует amount >= min_first_deposit и инициализирует позицию.
        При смене активного venue с ненулевым балансом: прежний venue гасится
        полностью, выручка в base asset суммируется с новым депозитом, сумма
        конвертируется в asset нового venue и вносится одним batch.
        """

        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, Position]:
            position = state.position
            self._require_positive(amount)
            self._require_whitelisted(state, venue)
            if not position.initialized and amount < self.config.min_first_deposit:
                raise PolicyError(
                    "below_min_deposit",
                    f"first deposit {amount} below minimum {self.config.min_first_deposit}",
                )

            self._transfer(state.base_asset, caller, self.account, amount)

            previous = position.current_venue
            carried_over = 0
            if previous is not None and previous != venue:
                shares = self._vault(previous).balance_of(self.account)
                if shares > 0:
                    receipt = self.executor.redeem(previous, shares)
                    carried_over = self._convert(
                        self._asset_of(previous), state.base_asset, receipt.amount_out, now, events
                    )

            deploy = self._convert(
                state.base_asset, self._asset_of(venue), amount + carried_over, now, events
            )
            self.executor.deposit(venue, deploy)

            new_position = position.with_deposit(venue, amount, now)
            events.append(
                Deposited(
                    ts=now,
                    venue=venue,
                    amount=amount,
                    previous_venue=previous if previous != venue else None,
                    carried_over=carried_over,
                    principal_after=new_position.principal,
                )
            )
            return state.model_copy(update={"position": new_position}), new_position

        return self._run(caller, Operation.INITIAL_DEPOSIT, body)

    def periodic_rebalance(self, caller: str, target_venue: str) -> Position:
        """Перевод всей позиции в `target_venue` с соблюдением cooldown.

        target_venue == current_venue — no-op: только обновление timestamp,
        без свопа и без batch.
        """

        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, Position]:
            position = state.position
            self._require_initialized(state)
            if position.principal == 0:
                raise PolicyError("zero_principal", "nothing to rebalance")
            self._require_whitelisted(state, target_venue)

            remaining = position.cooldown_remaining(now, self.config.rebalance_cooldown_sec)
            if remaining > 0:
                raise PolicyError("cooldown_active", f"next rebalance allowed in {remaining}s")

            current = position.current_venue
            if target_venue == current:
                new_position = position.with_rebalance_ts(now)
                events.append(
                    Rebalanced(ts=now, from_venue=current, to_venue=target_venue, timestamp_only=True)
                )
                return state.model_copy(update={"position": new_position}), new_position

            receipt = self.executor.redeem_all(current)
            deploy = self._convert(
                self._asset_of(current), self._asset_of(target_venue), receipt.amount_out, now, events
            )
            self.executor.deposit(target_venue, deploy)

            new_position = position.with_venue(target_venue, now)
            events.append(
                Rebalanced(
                    ts=now,
                    from_venue=current,
                    to_venue=target_venue,
                    assets_redeemed=receipt.amount_out,
                    assets_deployed=deploy,
                )
            )
            return state.model_copy(update={"position": new_position}), new_position

        return self._run(caller, Operation.PERIODIC_REBALANCE, body)

    def withdraw(self, caller: str, venue: str, amount: int = 0) -> FeeSplit:
        """Вывод `amount` shares из активного venue.

        amount == 0 или больше баланса — вывод всего баланса. Выручка
        конвертируется в base asset, комиссия считается против principal,
        principal уменьшается на выручку до комиссии (с полом в нуле).
        """

        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, FeeSplit]:
            position = state.position
            self._require_initialized(state)
            self._require_active(state, venue)
            self._require_int(amount)
            if amount < 0:
                raise PolicyError("negative_amount", f"withdraw amount {amount} is negative")

            balance = self._vault(venue).balance_of(self.account)
            if balance == 0:
                raise PolicyError("zero_balance", f"no shares held in {venue}")
            shares = balance if amount == 0 or amount > balance else amount

            receipt = self.executor.redeem(venue, shares)
            settlement = self._convert(
                self._asset_of(venue), state.base_asset, receipt.amount_out, now, events
            )
            policy = state.fee_policy
            split = fee_split(settlement, position.principal, policy.rate_bps, policy.min_profit_threshold)
            self._pay_out(state, split, "withdraw", now, events)

            new_position = position.with_redeemed(settlement)
            events.append(
                Withdrawn(
                    ts=now,
                    venue=venue,
                    shares=shares,
                    settlement=settlement,
                    fee=split.fee,
                    net=split.net,
                    principal_after=new_position.principal,
                )
            )
            return (
                state.model_copy(
                    update={
                        "position": new_position,
                        "fee_ledger": state.fee_ledger.with_fee(split.fee),
                    }
                ),
                split,
            )

        return self._run(caller, Operation.WITHDRAW, body)

    def manual_rebalance(self, caller: str, from_venue: str, to_venue: str) -> FeeSplit:
        """Перевод позиции admin с комиссией rebalance_fee_bps с прибыли.

        Principal не меняется: средства остаются инвестированными.
        """

        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, FeeSplit]:
            position = state.position
            self._require_initialized(state)
            self._require_active(state, from_venue)
            if from_venue == to_venue:
                raise PolicyError("same_venue", f"{from_venue} is already the active venue")
            self._require_whitelisted(state, to_venue)

            receipt = self.executor.redeem_all(from_venue)
            settlement = self._convert(
                self._asset_of(from_venue), state.base_asset, receipt.amount_out, now, events
            )
            split = fee_split(settlement, position.principal, self.config.rebalance_fee_bps)
            if split.fee > 0:
                self._transfer(state.base_asset, self.account, state.fee_policy.recipient, split.fee)
                events.append(
                    FeeCharged(
                        ts=now,
                        recipient=state.fee_policy.recipient,
                        amount=split.fee,
                        source="manual_rebalance",
                    )
                )

            deploy = self._convert(state.base_asset, self._asset_of(to_venue), split.net, now, events)
            self.executor.deposit(to_venue, deploy)

            events.append(
                ManuallyRebalanced(
                    ts=now,
                    from_venue=from_venue,
                    to_venue=to_venue,
                    settlement=settlement,
                    profit=split.profit,
                    fee=split.fee,
                    assets_deployed=deploy,
                )
            )
            return (
                state.model_copy(
                    update={
                        "position": position.with_venue(to_venue),
                        "fee_ledger": state.fee_ledger.with_fee(split.fee),
                    }
                ),
                split,
            )

        return self._run(caller, Operation.MANUAL_REBALANCE, body)

    def emergency_exit(self, caller: str, venue: str) -> FeeSplit:
        """Полный вывод на паузе по стандартной политике комиссий; principal → 0."""

        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, FeeSplit]:
            position = state.position
            self._require_active(state, venue)

            shares = self._vault(venue).balance_of(self.account)
            if shares == 0:
                raise PolicyError("zero_balance", f"no shares held in {venue}")

            receipt = self.executor.redeem(venue, shares)
            settlement = self._convert(
                self._asset_of(venue), state.base_asset, receipt.amount_out, now, events
            )
            policy = state.fee_policy
            split = fee_split(settlement, position.principal, policy.rate_bps, policy.min_profit_threshold)
            self._pay_out(state, split, "emergency_exit", now, events)

            events.append(
                EmergencyExited(
                    ts=now, venue=venue, shares=shares, settlement=settlement, fee=split.fee, net=split.net
                )
            )
            return (
                state.model_copy(
                    update={
                        "position": position.with_zero_principal(),
                        "fee_ledger": state.fee_ledger.with_fee(split.fee),
                    }
                ),
                split,
            )

        return self._run(caller, Operation.EMERGENCY_EXIT, body)

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    def add_venue(self, caller: str, venue: str) -> None:
        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, None]:
            if venue in state.whitelist:
                raise PolicyError("venue_already_whitelisted", venue)
            self._require_resolvable(venue)
            events.append(VenueAdded(ts=now, venue=venue))
            return state.model_copy(update={"whitelist": state.whitelist.with_added(venue)}), None

        self._run(caller, Operation.ADD_VENUE, body)

    def remove_venue(self, caller: str, venue: str) -> None:
        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, None]:
            self._require_whitelisted(state, venue)
            if venue == state.position.current_venue:
                raise StateError("remove_active_venue", f"{venue} holds the active position")
            events.append(VenueRemoved(ts=now, venue=venue))
            return state.model_copy(update={"whitelist": state.whitelist.with_removed(venue)}), None

        self._run(caller, Operation.REMOVE_VENUE, body)

    def set_fee_rate(self, caller: str, rate_bps: int) -> FeePolicy:
        def update(policy: FeePolicy) -> FeePolicy:
            if rate_bps < 0 or rate_bps > policy.max_rate_bps:
                raise PolicyError(
                    "fee_rate_above_cap", f"rate {rate_bps} bps outside [0, {policy.max_rate_bps}]"
                )
            return policy.model_copy(update={"rate_bps": rate_bps})

        return self._update_fee_policy(caller, update)

    def set_min_profit_threshold(self, caller: str, threshold: int) -> FeePolicy:
        def update(policy: FeePolicy) -> FeePolicy:
            if threshold < 0:
                raise PolicyError("negative_threshold", f"threshold {threshold} is negative")
            return policy.model_copy(update={"min_profit_threshold": threshold})

        return self._update_fee_policy(caller, update)

    def set_fee_recipient(self, caller: str, recipient: str) -> FeePolicy:
        def update(policy: FeePolicy) -> FeePolicy:
            if not recipient:
                raise PolicyError("invalid_recipient", "fee recipient cannot be empty")
            return policy.model_copy(update={"recipient": recipient})

        return self._update_fee_policy(caller, update)

    def pause(self, caller: str) -> None:
        self._set_paused(caller, Operation.PAUSE, True)

    def unpause(self, caller: str) -> None:
        self._set_paused(caller, Operation.UNPAUSE, False)

    # =========================================================================
    # READ-ONLY QUERIES
    # =========================================================================

    def state(self) -> VaultState:
        return self._state

    def position(self) -> Position:
        return self._state.position

    def whitelisted_venues(self) -> List[str]:
        return list(self._state.whitelist.venues)

    def venue_balance(self, venue: str) -> int:
        """Shares позиции в venue."""
        return self._vault(venue).balance_of(self.account)

    def position_value(self) -> int:
        """Текущая стоимость позиции в base asset (convertToAssets + preview свопа)."""
        venue = self._state.position.current_venue
        if venue is None:
            return 0
        vault = self._vault(venue)
        shares = vault.balance_of(self.account)
        if shares == 0:
            return 0
        return self._preview_to_base(vault.asset(), vault.convert_to_assets(shares))

    def preview_fee(self) -> FeeSplit:
        """FeeSplit полного вывода прямо сейчас (previewRedeem + preview свопа)."""
        state = self._state
        settlement = 0
        venue = state.position.current_venue
        if venue is not None:
            vault = self._vault(venue)
            shares = vault.balance_of(self.account)
            if shares > 0:
                settlement = self._preview_to_base(vault.asset(), vault.preview_redeem(shares))
        policy = state.fee_policy
        return fee_split(settlement, state.position.principal, policy.rate_bps, policy.min_profit_threshold)

    def time_until_next_rebalance(self) -> int:
        return self._state.position.cooldown_remaining(self.chain.now(), self.config.rebalance_cooldown_sec)

    def status(self) -> VaultStatus:
        state = self._state
        venue = state.position.current_venue
        return VaultStatus(
            ts=self.chain.now(),
            ledger_state=state.ledger_state,
            paused=state.paused,
            principal=state.position.principal,
            current_venue=venue,
            venue_shares=self.venue_balance(venue) if venue is not None else 0,
            position_value=self.position_value(),
            pending_fee=self.preview_fee().fee,
            total_fees_collected=state.fee_ledger.total_fees_collected,
            fee_rate_bps=state.fee_policy.rate_bps,
            seconds_until_rebalance=self.time_until_next_rebalance(),
            whitelist=list(state.whitelist.venues),
        )

    # =========================================================================
    # OPERATION PLUMBING
    # =========================================================================

    def _run(
        self,
        caller: str,
        operation: Operation,
        body: Callable[[VaultState, int, List[VaultEvent]], Tuple[VaultState, T]],
    ) -> T:
        with self._guard:
            try:
                self._admit(caller, operation)
                events: List[VaultEvent] = []
                with self.chain.transaction():
                    new_state, result = body(self._state, self.chain.now(), events)
            except VaultError as e:
                log_gate_block(operation.value, caller, e.reason, e.details)
                raise
            except Exception as e:
                log_gate_block(operation.value, caller, "unexpected_error", f"{type(e).__name__}: {e}")
                raise

            self._state = new_state
            for event in events:
                log_event(event)
                self.event_sink.emit(event)
            return result

    def _admit(self, caller: str, operation: Operation) -> None:
        access = self._access_gate.evaluate(self._state, caller, operation)
        if not access.allowed:
            raise AuthorizationError(access.block_reason, access.details)

        pause = self._pause_gate.evaluate(self._state.paused, operation)
        if not pause.allowed:
            if pause.block_reason == "not_paused":
                raise StateError(pause.block_reason, pause.details)
            raise PolicyError(pause.block_reason, pause.details)

    def _update_fee_policy(self, caller: str, update: Callable[[FeePolicy], FeePolicy]) -> FeePolicy:
        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, FeePolicy]:
            policy = update(state.fee_policy)
            events.append(
                FeePolicyUpdated(
                    ts=now,
                    rate_bps=policy.rate_bps,
                    min_profit_threshold=policy.min_profit_threshold,
                    recipient=policy.recipient,
                )
            )
            return state.model_copy(update={"fee_policy": policy}), policy

        return self._run(caller, Operation.SET_FEE_POLICY, body)

    def _set_paused(self, caller: str, operation: Operation, paused: bool) -> None:
        def body(state: VaultState, now: int, events: List[VaultEvent]) -> Tuple[VaultState, None]:
            if state.paused == paused:
                raise StateError("already_paused" if paused else "not_paused", "pause flag unchanged")
            events.append(PauseChanged(ts=now, paused=paused))
            return state.model_copy(update={"paused": paused}), None

        self._run(caller, operation, body)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _convert(
        self, token_in: str, token_out: str, amount: int, now: int, events: List[VaultEvent]
    ) -> int:
        """Конверсия через SwapRouter, если токены различаются."""
        if token_in == token_out or amount == 0:
            return amount
        result = self.swap_router.convert(token_in, token_out, amount)
        events.append(
            Swapped(
                ts=now,
                token_in=token_in,
                token_out=token_out,
                amount_in=amount,
                amount_out=result.amount_out,
                min_out=result.min_out,
                stable=result.decision.selected.stable,
            )
        )
        return result.amount_out

    def _preview_to_base(self, asset: str, amount: int) -> int:
        if asset == self._state.base_asset or amount == 0:
            return amount
        return self.swap_router.preview_out(asset, self._state.base_asset, amount)

    def _pay_out(
        self, state: VaultState, split: FeeSplit, source: str, now: int, events: List[VaultEvent]
    ) -> None:
        if split.fee > 0:
            self._transfer(state.base_asset, self.account, state.fee_policy.recipient, split.fee)
            events.append(
                FeeCharged(ts=now, recipient=state.fee_policy.recipient, amount=split.fee, source=source)
            )
        self._transfer(state.base_asset, self.account, state.owner, split.net)

    def _transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if amount == 0:
            return
        try:
            self.tokens.transfer(token, sender, recipient, amount)
        except Exception as exc:
            raise ExecutionError(
                "transfer_failed", f"{amount} {token} {sender} -> {recipient}: {exc}"
            ) from exc

    def _vault(self, venue: str) -> Vault:
        try:
            return self.vaults.vault(venue)
        except KeyError as exc:
            raise StateError("unknown_venue", f"venue {venue} cannot be resolved") from exc

    def _asset_of(self, venue: str) -> str:
        return self._vault(venue).asset()

    def _require_resolvable(self, venue: str) -> None:
        if not venue:
            raise PolicyError("invalid_venue", "venue identifier cannot be empty")
        try:
            self.vaults.vault(venue).asset()
        except Exception as exc:
            raise PolicyError("invalid_venue", f"{venue} does not expose an asset: {exc}") from exc

    @staticmethod
    def _require_int(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise PolicyError("invalid_amount", f"amount must be int, got {type(amount).__name__}")

    @classmethod
    def _require_positive(cls, amount: int) -> None:
        cls._require_int(amount)
        if amount <= 0:
            raise PolicyError("zero_amount", "amount must be positive")

    @staticmethod
    def _require_whitelisted(state: VaultState, venue: str) -> None:
        if venue not in state.whitelist:
            raise PolicyError("venue_not_whitelisted", venue)

    @staticmethod
    def _require_initialized(state: VaultState) -> None:
        if not state.position.initialized:
            raise PolicyError("not_initialized", "no deposit has been made yet")

    @staticmethod
    def _require_active(state: VaultState, venue: str) -> None:
        if venue != state.position.current_venue:
            raise StateError(
                "venue_not_active", f"{venue} is not the active venue ({state.position.current_venue})"
            )
