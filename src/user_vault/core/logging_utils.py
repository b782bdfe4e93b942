"""Structured logging for vault events, swaps, atomic batches and gate blocks."""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel

logger = logging.getLogger("user_vault")


def _format(name: str, fields: Dict[str, Any]) -> str:
    return name + " " + " ".join(f"{k}={v}" for k, v in sorted(fields.items()))


def log_event(event: BaseModel) -> None:
    """Log a committed vault event as structured key-value."""
    fields = event.model_dump(mode="json")
    kind = fields.pop("kind", type(event).__name__)
    logger.info(_format(f"vault_event.{kind}", fields))


def log_swap(
    token_in: str,
    token_out: str,
    amount_in: int,
    expected_out: int,
    min_out: int,
    stable: bool,
    extra: Optional[dict] = None,
) -> None:
    """Log a swap about to be executed on the selected pool."""
    fields = dict(extra or {})
    fields.update(
        token_in=token_in,
        token_out=token_out,
        amount_in=amount_in,
        expected_out=expected_out,
        min_out=min_out,
        stable=stable,
    )
    logger.info(_format("swap", fields))


def log_batch(kind: str, vault: str, amount: int, amount_out: int) -> None:
    """Log a completed atomic batch."""
    logger.info(
        _format("atomic_batch", {"kind": kind, "vault": vault, "amount": amount, "amount_out": amount_out})
    )


def log_gate_block(operation: str, caller: str, reason: str, details: str = "") -> None:
    """Log an operation rejected by a gate or a policy check."""
    fields: Dict[str, Any] = {"operation": operation, "caller": caller, "reason": reason}
    if details:
        fields["details"] = repr(details)
    logger.warning(_format("operation_rejected", fields))


def configure_logging(level: int = logging.INFO) -> None:
    """Configure console logging once; only entry points (user-vault-paper) call it."""
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
    root.setLevel(level)
