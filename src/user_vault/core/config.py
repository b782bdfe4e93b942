"""
VaultConfig — статическая конфигурация экземпляра vault

Параметры фиксируются при создании ledger. Изменяемая часть политики
комиссий (ставка, порог, получатель) живёт в FeePolicy и меняется admin.

Загрузка из JSON файла проходит валидацию контракта vault_config.
"""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Final

from jsonschema import ValidationError

from user_vault.core.contracts import validate_vault_config
from user_vault.core.errors import PolicyError
from user_vault.core.math.fixed_point import BPS_DENOMINATOR


# =============================================================================
# DEFAULTS
# =============================================================================

# 10 единиц 6-знакового base asset
DEFAULT_MIN_FIRST_DEPOSIT: Final[int] = 10_000_000

DEFAULT_REBALANCE_COOLDOWN_SEC: Final[int] = 86_400

DEFAULT_FEE_RATE_BPS: Final[int] = 100

# Cap для любой ставки, устанавливаемой admin
MAX_FEE_RATE_BPS: Final[int] = 1_000

DEFAULT_REBALANCE_FEE_BPS: Final[int] = 500

DEFAULT_MIN_PROFIT_THRESHOLD: Final[int] = 1_000_000

# 0.1% bias в пользу stable-пула
DEFAULT_STABLE_BIAS_BPS: Final[int] = 10

# 5% slippage tolerance
DEFAULT_SLIPPAGE_BPS: Final[int] = 500

# 5 минут
DEFAULT_SWAP_DEADLINE_SEC: Final[int] = 300


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class VaultConfig:
    """Конфигурация vault.

    Инварианты:
    - fee_rate_bps <= max_fee_rate_bps <= 10000
    - fee_rate_bps < rebalance_fee_bps <= max_fee_rate_bps
    - slippage_bps < 10000
    """

    min_first_deposit: int = DEFAULT_MIN_FIRST_DEPOSIT
    rebalance_cooldown_sec: int = DEFAULT_REBALANCE_COOLDOWN_SEC

    # Fees
    fee_rate_bps: int = DEFAULT_FEE_RATE_BPS
    max_fee_rate_bps: int = MAX_FEE_RATE_BPS
    rebalance_fee_bps: int = DEFAULT_REBALANCE_FEE_BPS
    min_profit_threshold: int = DEFAULT_MIN_PROFIT_THRESHOLD

    # Swap routing
    stable_bias_bps: int = DEFAULT_STABLE_BIAS_BPS
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    swap_deadline_sec: int = DEFAULT_SWAP_DEADLINE_SEC

    def __post_init__(self) -> None:
        # Только int: bool и float (500.0 из JSON) отклоняются
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise PolicyError(
                    "invalid_config", f"{f.name} must be int, got {type(value).__name__}"
                )
        if self.min_first_deposit <= 0:
            raise PolicyError("invalid_config", "min_first_deposit must be positive")
        if self.rebalance_cooldown_sec < 0:
            raise PolicyError("invalid_config", "rebalance_cooldown_sec cannot be negative")
        if not 0 <= self.max_fee_rate_bps <= BPS_DENOMINATOR:
            raise PolicyError(
                "invalid_config", f"max_fee_rate_bps {self.max_fee_rate_bps} out of range"
            )
        if not 0 <= self.fee_rate_bps <= self.max_fee_rate_bps:
            raise PolicyError(
                "fee_rate_above_cap",
                f"fee_rate_bps {self.fee_rate_bps} exceeds cap {self.max_fee_rate_bps}",
            )
        if not self.fee_rate_bps < self.rebalance_fee_bps <= self.max_fee_rate_bps:
            raise PolicyError(
                "invalid_config",
                f"rebalance_fee_bps {self.rebalance_fee_bps} must be above "
                f"fee_rate_bps {self.fee_rate_bps} and within cap {self.max_fee_rate_bps}",
            )
        if self.min_profit_threshold < 0:
            raise PolicyError("invalid_config", "min_profit_threshold cannot be negative")
        if not 0 <= self.stable_bias_bps <= BPS_DENOMINATOR:
            raise PolicyError("invalid_config", "stable_bias_bps out of range")
        if not 0 <= self.slippage_bps < BPS_DENOMINATOR:
            raise PolicyError("invalid_config", "slippage_bps must be below 10000")
        if self.swap_deadline_sec <= 0:
            raise PolicyError("invalid_config", "swap_deadline_sec must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def config_from_dict(data: Dict[str, Any]) -> VaultConfig:
    """
    Построение VaultConfig из dict с проверкой контракта vault_config.

    Отсутствующие ключи берутся из defaults.

    Raises:
        PolicyError: Если данные не соответствуют контракту или инвариантам
    """
    try:
        validate_vault_config(data)
    except ValidationError as e:
        raise PolicyError("invalid_config", e.message) from e
    return VaultConfig(**data)


def load_config(path: Path | str) -> VaultConfig:
    """Загрузка VaultConfig из JSON файла."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise PolicyError("invalid_config", f"{path}: top-level JSON value must be an object")
    return config_from_dict(data)
