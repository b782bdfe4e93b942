"""Gates — индивидуальные гейты допуска операций.

- GATE 0: Access (роль вызывающего)
- GATE 1: Pause (глобальный kill-switch)
"""

from .gate_00_access import REQUIRED_ROLES, AccessResult, Gate00Access, Operation
from .gate_01_pause import ADMINISTRATIVE_OPERATIONS, Gate01Pause, PauseResult

__all__ = [
    "Operation",
    "REQUIRED_ROLES",
    "Gate00Access",
    "AccessResult",
    "ADMINISTRATIVE_OPERATIONS",
    "Gate01Pause",
    "PauseResult",
]
