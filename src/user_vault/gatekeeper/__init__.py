"""Gatekeeper — гейты допуска операций к исполнению.

Фиксированный порядок: GATE 0 (access) → GATE 1 (pause).
"""

from .gates.gate_00_access import AccessResult, Gate00Access, Operation
from .gates.gate_01_pause import Gate01Pause, PauseResult

__all__ = [
    "Operation",
    "Gate00Access",
    "AccessResult",
    "Gate01Pause",
    "PauseResult",
]
