"""
User Vault — single-owner custodial position manager.

Moves one pool of funds between whitelisted ERC-4626 venues, converts assets
through the better of two liquidity pools and charges a profit-only fee on
withdrawal and manual rebalance.
"""

from user_vault.core.config import VaultConfig, load_config
from user_vault.core.errors import (
    AuthorizationError,
    ExecutionError,
    LiquidityError,
    PolicyError,
    ReentrancyError,
    StateError,
    VaultError,
)
from user_vault.fees.fee_engine import FeeSplit, fee_split
from user_vault.ledger.position_ledger import Collaborators, PositionLedger

__version__ = "0.1.0"

__all__ = [
    "PositionLedger",
    "Collaborators",
    "VaultConfig",
    "load_config",
    "FeeSplit",
    "fee_split",
    "VaultError",
    "AuthorizationError",
    "PolicyError",
    "LiquidityError",
    "ExecutionError",
    "StateError",
    "ReentrancyError",
]
