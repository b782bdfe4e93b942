"""Execution — atomic two-step deposit/redeem batches against vault venues."""

from .atomic_executor import AtomicExecutor, ExecutionReceipt, VaultAction, VaultCommand

__all__ = [
    "AtomicExecutor",
    "ExecutionReceipt",
    "VaultAction",
    "VaultCommand",
]
