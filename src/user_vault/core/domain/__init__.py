"""
Domain models and value objects.

Contains fundamental domain entities like Position, VaultState, FeePolicy
and the structured events emitted by the ledger.
"""

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
    parse_event,
)
from user_vault.core.domain.position import Position
from user_vault.core.domain.units import (
    BASE_ASSET_DECIMALS,
    format_amount,
    from_base_units,
    to_base_units,
)
from user_vault.core.domain.vault_state import (
    FeeLedger,
    FeePolicy,
    LedgerState,
    Role,
    VaultState,
    VaultStatus,
    VenueWhitelist,
)

__all__ = [
    # Units module
    "BASE_ASSET_DECIMALS",
    "to_base_units",
    "from_base_units",
    "format_amount",
    # Position model
    "Position",
    # Vault state
    "VaultState",
    "VaultStatus",
    "VenueWhitelist",
    "FeePolicy",
    "FeeLedger",
    "LedgerState",
    "Role",
    # Events
    "VaultEvent",
    "Deposited",
    "Rebalanced",
    "ManuallyRebalanced",
    "Withdrawn",
    "EmergencyExited",
    "Swapped",
    "FeeCharged",
    "VenueAdded",
    "VenueRemoved",
    "FeePolicyUpdated",
    "PauseChanged",
    "parse_event",
]
