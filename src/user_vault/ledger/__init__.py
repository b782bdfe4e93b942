"""Ledger — state machine позиции vault.

- PositionLedger: deposit, periodic/manual rebalance, withdraw, emergency exit
- NonReentrantGuard: сериализация операций
- EventLog: in-memory приёмник событий
"""

from .event_log import EventLog, EventSink
from .guard import NonReentrantGuard
from .position_ledger import Collaborators, PositionLedger

__all__ = [
    "PositionLedger",
    "Collaborators",
    "NonReentrantGuard",
    "EventLog",
    "EventSink",
]
