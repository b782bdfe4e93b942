"""
Contract Validation Module

Модуль для валидации JSON контрактов vault: конфигурация, события, статус.
"""

from .validators import (
    ContractValidator,
    SchemaLoader,
    VaultConfigValidator,
    VaultEventValidator,
    VaultStatusValidator,
    validate_vault_config,
    validate_vault_event,
    validate_vault_status,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "VaultConfigValidator",
    "VaultEventValidator",
    "VaultStatusValidator",
    # Functions
    "validate_vault_config",
    "validate_vault_event",
    "validate_vault_status",
]
