"""
JSON Schema Contract Validators

Проверка конфигурации, событий и статуса vault против формальных контрактов
(jsonschema, Draft 2020-12). Контракт — граница с внешним миром: JSON файл
конфигурации на входе, события и снапшот статуса на выходе к наблюдателям.

Схемы (user_vault/core/contracts/schema/):
- vault_config.json — статическая конфигурация vault (все ключи опциональны)
- vault_event.json — событие после commit операции, поля зависят от `kind`
- vault_status.json — read-only снапшот статуса
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

SCHEMA_DIR = Path(__file__).parent / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик контрактов из каталога схем.

    Каждая схема проходит meta-validation при первой загрузке и кэшируется.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or SCHEMA_DIR
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._cache: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Контракт по имени без расширения ('vault_event').

        Raises:
            FileNotFoundError: Нет файла `<schema_name>.json`
            ValueError: Файл не является валидной JSON Schema
        """
        cached = self._cache.get(schema_name)
        if cached is not None:
            return cached

        path = self._schema_dir / f"{schema_name}.json"
        if not path.is_file():
            raise FileNotFoundError(f"Schema not found: {path}")

        schema = json.loads(path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"{path.name} is not a valid Draft 2020-12 schema: {e.message}") from e

        self._cache[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Валидатор одного контракта; наследники задают `schema_name`."""

    schema_name: str = ""

    def __init__(self, loader: SchemaLoader | None = None):
        self.schema = (loader or _SCHEMA_LOADER).load_schema(self.schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Первое (наиболее релевантное) нарушение контракта
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        """Все нарушения контракта сразу (для диагностики)."""
        return self.validator.iter_errors(data)


class VaultConfigValidator(ContractValidator):
    schema_name = "vault_config"


class VaultEventValidator(ContractValidator):
    schema_name = "vault_event"


class VaultStatusValidator(ContractValidator):
    schema_name = "vault_status"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_vault_config(data: Dict[str, Any]) -> None:
    """Проверка dict конфигурации до построения VaultConfig."""
    VaultConfigValidator().validate(data)


def validate_vault_event(data: Dict[str, Any]) -> None:
    """Проверка события, сериализованного через model_dump(mode="json")."""
    VaultEventValidator().validate(data)


def validate_vault_status(data: Dict[str, Any]) -> None:
    """Проверка снапшота статуса, сериализованного через model_dump(mode="json")."""
    VaultStatusValidator().validate(data)
