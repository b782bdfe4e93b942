"""Non-reentrant guard spanning each public ledger operation end-to-end."""

from user_vault.core.errors import ReentrancyError


class NonReentrantGuard:
    """Context manager; a nested entry raises ReentrancyError."""

    def __init__(self) -> None:
        self._entered = False

    @property
    def entered(self) -> bool:
        return self._entered

    def __enter__(self) -> "NonReentrantGuard":
        if self._entered:
            raise ReentrancyError("reentrant_call", "another vault operation is in flight")
        self._entered = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._entered = False
