"""
Error taxonomy — иерархия ошибок vault

Каждая ошибка несёт машинный код `reason` (snake_case) и человекочитаемые
`details`. Любая ошибка прерывает операцию целиком: ни частичных изменений
ledger, ни частичного движения средств.

Классы:
- AuthorizationError: вызывающий не имеет нужной роли
- PolicyError: venue не в whitelist, сумма ниже минимума, cooldown,
  операция до инициализации, ставка выше cap
- LiquidityError: нет пула для нужной конверсии
- ExecutionError: внешний своп или batch нарушил свой контракт
- StateError: действие над неактивным venue, удаление активного venue
"""


class VaultError(Exception):
    """Базовая ошибка vault."""

    def __init__(self, reason: str, details: str = ""):
        self.reason = reason
        self.details = details
        message = f"{reason}: {details}" if details else reason
        super().__init__(message)


class AuthorizationError(VaultError):
    """Вызывающий не имеет роли, требуемой операцией."""


class PolicyError(VaultError):
    """Операция нарушает политику vault."""


class LiquidityError(VaultError):
    """Для пары токенов не существует ни одного пула."""


class ExecutionError(VaultError):
    """Внешний своп или atomic batch завершился неуспешно."""


class StateError(VaultError):
    """Операция несовместима с текущим состоянием позиции."""


class ReentrancyError(StateError):
    """Повторный вход в операцию, пока предыдущая не завершена."""
