"""
VaultState — снапшот состояния vault

Immutable Pydantic модели:
- VenueWhitelist: упорядоченное по вставке множество разрешённых venue
- FeePolicy: ставка, порог прибыли, получатель комиссии
- FeeLedger: накопленные комиссии (монотонно неубывающие)
- VaultState: позиция + whitelist + fee policy + fee ledger + pause flag

Единственный writer — PositionLedger. Каждое изменение создаёт новый
экземпляр VaultState.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from .position import Position


# =============================================================================
# ENUMS
# =============================================================================


class LedgerState(str, Enum):
    """Состояние ledger (pause — ортогональный флаг)."""

    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"


class Role(str, Enum):
    """Роли вызывающих."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    PUBLIC = "PUBLIC"


# =============================================================================
# NESTED MODELS
# =============================================================================


class VenueWhitelist(BaseModel):
    """Упорядоченное по вставке множество разрешённых venue."""

    venues: tuple[str, ...] = Field(default_factory=tuple, description="Venue в порядке добавления")

    model_config = {"frozen": True}

    @field_validator("venues")
    @classmethod
    def validate_unique(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(set(v)) != len(v):
            raise ValueError("venues must be unique")
        if any(not venue for venue in v):
            raise ValueError("venue identifier cannot be empty")
        return v

    def __contains__(self, venue: object) -> bool:
        return venue in self.venues

    def with_added(self, venue: str) -> "VenueWhitelist":
        return VenueWhitelist(venues=self.venues + (venue,))

    def with_removed(self, venue: str) -> "VenueWhitelist":
        return VenueWhitelist(venues=tuple(v for v in self.venues if v != venue))


class FeePolicy(BaseModel):
    """
    Политика комиссии.

    rate_bps ограничена max_rate_bps всегда; изменяется только admin.
    """

    rate_bps: int = Field(..., ge=0, description="Стандартная ставка (bps)")
    max_rate_bps: int = Field(1_000, ge=0, le=10_000, description="Cap ставки (bps)")
    min_profit_threshold: int = Field(
        ..., ge=0, description="Прибыль <= порога не облагается (base units)"
    )
    recipient: str = Field(..., min_length=1, description="Получатель комиссии")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_rate_cap(self) -> "FeePolicy":
        if self.rate_bps > self.max_rate_bps:
            raise ValueError(
                f"rate_bps {self.rate_bps} exceeds cap {self.max_rate_bps}"
            )
        return self


class FeeLedger(BaseModel):
    """Учёт собранных комиссий."""

    total_fees_collected: int = Field(0, ge=0, description="Всего комиссий (base units)")

    model_config = {"frozen": True}

    def with_fee(self, fee: int) -> "FeeLedger":
        if fee < 0:
            raise ValueError(f"fee cannot be negative: {fee}")
        return FeeLedger(total_fees_collected=self.total_fees_collected + fee)


# =============================================================================
# VAULT STATE MODEL
# =============================================================================


class VaultState(BaseModel):
    """
    Полный снапшот состояния vault.

    Инварианты:
    - position.current_venue, если задан, всегда входит в whitelist
    - fee_policy.rate_bps <= fee_policy.max_rate_bps
    """

    owner: str = Field(..., min_length=1, description="Владелец позиции")
    admin: str = Field(..., min_length=1, description="Администратор")
    base_asset: str = Field(..., min_length=1, description="Base asset для учёта principal/fee")

    position: Position = Field(default_factory=Position, description="Позиция")
    whitelist: VenueWhitelist = Field(default_factory=VenueWhitelist, description="Whitelist venue")
    fee_policy: FeePolicy = Field(..., description="Политика комиссии")
    fee_ledger: FeeLedger = Field(default_factory=FeeLedger, description="Учёт комиссий")
    paused: bool = Field(False, description="Глобальная пауза")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_active_venue_whitelisted(self) -> "VaultState":
        venue = self.position.current_venue
        if venue is not None and venue not in self.whitelist:
            raise ValueError(f"current venue {venue} is not whitelisted")
        return self

    @property
    def ledger_state(self) -> LedgerState:
        if self.position.initialized:
            return LedgerState.ACTIVE
        return LedgerState.UNINITIALIZED

    def roles_of(self, caller: str) -> frozenset[Role]:
        """Все роли вызывающего."""
        roles = set()
        if caller == self.owner:
            roles.add(Role.OWNER)
        if caller == self.admin:
            roles.add(Role.ADMIN)
        return frozenset(roles) or frozenset({Role.PUBLIC})


# =============================================================================
# STATUS SNAPSHOT
# =============================================================================


class VaultStatus(BaseModel):
    """
    Read-only снапшот статуса для внешних наблюдателей.

    model_dump(mode="json") соответствует контракту vault_status.
    """

    ts: int = Field(..., ge=0, description="Время снапшота (Unix, секунды)")
    ledger_state: LedgerState
    paused: bool
    principal: int = Field(..., ge=0)
    current_venue: str | None = None
    venue_shares: int = Field(..., ge=0, description="Shares в активном venue")
    position_value: int = Field(..., ge=0, description="Стоимость позиции в base asset")
    pending_fee: int = Field(..., ge=0, description="Комиссия при полном выводе сейчас")
    total_fees_collected: int = Field(..., ge=0)
    fee_rate_bps: int = Field(..., ge=0)
    seconds_until_rebalance: int = Field(..., ge=0)
    whitelist: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}
