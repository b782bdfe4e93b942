"""
Events — структурированные события vault

Immutable Pydantic модели с дискриминатором `kind`. События буферизуются
во время операции и публикуются только после её успешного завершения.
model_dump(mode="json") каждого события соответствует контракту vault_event.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class _EventBase(BaseModel):
    ts: int = Field(..., ge=0, description="Время события (Unix, секунды)")

    model_config = {"frozen": True}


class Deposited(_EventBase):
    kind: Literal["deposited"] = "deposited"
    venue: str
    amount: int = Field(..., gt=0, description="Новый депозит в base units")
    previous_venue: Optional[str] = None
    carried_over: int = Field(0, ge=0, description="Base asset, перенесённый из прежнего venue")
    principal_after: int = Field(..., ge=0)


class Rebalanced(_EventBase):
    kind: Literal["rebalanced"] = "rebalanced"
    from_venue: str
    to_venue: str
    assets_redeemed: int = Field(0, ge=0)
    assets_deployed: int = Field(0, ge=0)
    timestamp_only: bool = Field(False, description="Rebalance в тот же venue")


class ManuallyRebalanced(_EventBase):
    kind: Literal["manually_rebalanced"] = "manually_rebalanced"
    from_venue: str
    to_venue: str
    settlement: int = Field(..., ge=0, description="Стоимость в base asset до комиссии")
    profit: int = Field(..., ge=0)
    fee: int = Field(..., ge=0)
    assets_deployed: int = Field(..., ge=0)


class Withdrawn(_EventBase):
    kind: Literal["withdrawn"] = "withdrawn"
    venue: str
    shares: int = Field(..., gt=0)
    settlement: int = Field(..., ge=0)
    fee: int = Field(..., ge=0)
    net: int = Field(..., ge=0)
    principal_after: int = Field(..., ge=0)


class EmergencyExited(_EventBase):
    kind: Literal["emergency_exited"] = "emergency_exited"
    venue: str
    shares: int = Field(..., gt=0)
    settlement: int = Field(..., ge=0)
    fee: int = Field(..., ge=0)
    net: int = Field(..., ge=0)


class Swapped(_EventBase):
    kind: Literal["swapped"] = "swapped"
    token_in: str
    token_out: str
    amount_in: int = Field(..., gt=0)
    amount_out: int = Field(..., ge=0)
    min_out: int = Field(..., ge=0)
    stable: bool = Field(..., description="Выбран stable-пул")


class FeeCharged(_EventBase):
    kind: Literal["fee_charged"] = "fee_charged"
    recipient: str
    amount: int = Field(..., gt=0)
    source: Literal["withdraw", "manual_rebalance", "emergency_exit"]


class VenueAdded(_EventBase):
    kind: Literal["venue_added"] = "venue_added"
    venue: str


class VenueRemoved(_EventBase):
    kind: Literal["venue_removed"] = "venue_removed"
    venue: str


class FeePolicyUpdated(_EventBase):
    kind: Literal["fee_policy_updated"] = "fee_policy_updated"
    rate_bps: int = Field(..., ge=0)
    min_profit_threshold: int = Field(..., ge=0)
    recipient: str


class PauseChanged(_EventBase):
    kind: Literal["pause_changed"] = "pause_changed"
    paused: bool


VaultEvent = Annotated[
    Union[
        Deposited,
        Rebalanced,
        ManuallyRebalanced,
        Withdrawn,
        EmergencyExited,
        Swapped,
        FeeCharged,
        VenueAdded,
        VenueRemoved,
        FeePolicyUpdated,
        PauseChanged,
    ],
    Field(discriminator="kind"),
]

VAULT_EVENT_ADAPTER: TypeAdapter = TypeAdapter(VaultEvent)


def parse_event(data: dict) -> VaultEvent:
    """Восстановление события из dict (например, из JSON лога)."""
    return VAULT_EVENT_ADAPTER.validate_python(data)
