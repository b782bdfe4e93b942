"""Venues — протоколы внешних коллабораторов (vaults, пулы, batch executor)."""

from .interfaces import (
    BatchCall,
    BatchExecutor,
    BatchResult,
    CallKind,
    Chain,
    LiquidityRouter,
    PoolFactory,
    Route,
    TokenLedger,
    Vault,
    VaultProvider,
)

__all__ = [
    "Chain",
    "TokenLedger",
    "Vault",
    "VaultProvider",
    "PoolFactory",
    "LiquidityRouter",
    "Route",
    "CallKind",
    "BatchCall",
    "BatchResult",
    "BatchExecutor",
]
