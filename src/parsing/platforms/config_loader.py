"""
Config Loader для конфигураций платформ.

ЦКП: Загрузка неизменяемой модели PlatformConfig для платформы.

Архитектурный принцип:
- Единая модель PlatformConfig для всех платформ
- Паттерны полей = упорядоченные списки (pattern, group, specificity)
- base.yaml хранит общие группы паттернов, платформы наследуют их через $extends
- Поле, которого нет в конфиге платформы, берётся из generic
- Конфиг загружается один раз и кешируется (read-only данные)
"""

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Tuple

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from config.settings import PLATFORMS_CONFIG_DIR
from contracts.order_record_dto import OrderStatus

from ..domain.exceptions import (
    InvalidPatternError,
    ParsingConfigurationError,
    PlatformConfigNotFoundError,
)


GENERIC_PLATFORM = "generic"

# Поля StructuredOrderRecord, для которых в конфиге есть списки паттернов
EXTRACTION_FIELDS: Tuple[str, ...] = (
    "order_id",
    "amount",
    "product_name",
    "expected_delivery",
    "carrier_name",
    "tracking_id",
)

_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
}


@lru_cache(maxsize=None)
def _compile(pattern: str, flags: str) -> "re.Pattern[str]":
    value = 0
    for flag in flags:
        value |= _FLAG_MAP[flag]
    return re.compile(pattern, value)


class ExtractionPattern(BaseModel):
    """
    Один паттерн извлечения поля.

    Атрибуты:
        pattern: Регулярное выражение
        group: Номер группы захвата со значением
        specificity: Специфичность (выше = проверяется раньше)
        flags: Флаги regex: "i" (IGNORECASE), "m" (MULTILINE)
        description: Для логов и отладки
    """
    pattern: str
    group: int = Field(1, ge=0)
    specificity: int = 50
    flags: str = "i"
    description: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator("flags")
    @classmethod
    def validate_flags(cls, v: str) -> str:
        unknown = set(v) - set(_FLAG_MAP)
        if unknown:
            raise ValueError(f"Неизвестные флаги regex: {sorted(unknown)}")
        return "".join(sorted(set(v)))

    @model_validator(mode="after")
    def validate_pattern(self) -> "ExtractionPattern":
        try:
            compiled = _compile(self.pattern, self.flags)
        except re.error as e:
            raise ValueError(f"Паттерн не компилируется: {self.pattern!r} ({e})")
        if self.group > compiled.groups:
            raise ValueError(
                f"Группа {self.group} отсутствует в паттерне {self.pattern!r} "
                f"(групп: {compiled.groups})"
            )
        return self

    @property
    def regex(self) -> "re.Pattern[str]":
        return _compile(self.pattern, self.flags)


class StatusRule(BaseModel):
    """Правило определения статуса: любое ключевое слово -> статус."""
    status: OrderStatus
    keywords: Tuple[str, ...]

    model_config = ConfigDict(frozen=True)

    @field_validator("keywords")
    @classmethod
    def lower_keywords(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(k.lower() for k in v if k)


class PlatformConfig(BaseModel):
    """
    Единая конфигурация платформы для парсинга.

    Содержит упорядоченные списки паттернов для всех полей Stage 6,
    правила статуса и удаления хвостов для Stage 7.
    """
    platform: str

    # Stage 6: Extraction
    order_id: Tuple[ExtractionPattern, ...] = ()
    amount: Tuple[ExtractionPattern, ...] = ()
    product_name: Tuple[ExtractionPattern, ...] = ()
    expected_delivery: Tuple[ExtractionPattern, ...] = ()
    carrier_name: Tuple[ExtractionPattern, ...] = ()
    tracking_id: Tuple[ExtractionPattern, ...] = ()
    status_keywords: Tuple[StatusRule, ...] = ()

    # Stage 7: Platform Post-Processing
    trailing_removals: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    # Внутренние поля (кеш и директория)
    _config_dir: ClassVar[Optional[Path]] = None
    _cache: ClassVar[Dict[Tuple[str, str], "PlatformConfig"]] = {}

    @field_validator("trailing_removals")
    @classmethod
    def validate_removals(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        for pattern in v:
            try:
                _compile(pattern, "m")
            except re.error as e:
                raise ValueError(f"Паттерн удаления не компилируется: {pattern!r} ({e})")
        return v

    def patterns_for(self, field_name: str) -> Tuple[ExtractionPattern, ...]:
        """Упорядоченный список паттернов поля."""
        if field_name not in EXTRACTION_FIELDS:
            raise KeyError(f"Неизвестное поле извлечения: {field_name}")
        return getattr(self, field_name)

    @property
    def removal_patterns(self) -> List["re.Pattern[str]"]:
        return [_compile(p, "m") for p in self.trailing_removals]

    @classmethod
    def load(cls, platform: str, config_dir: Optional[Path] = None) -> "PlatformConfig":
        """
        Загружает конфигурацию платформы из YAML файлов.

        Неизвестная платформа (нет <platform>/parsing.yaml) -> конфиг generic.
        """
        config_dir = Path(config_dir or cls._config_dir or PLATFORMS_CONFIG_DIR)
        platform = (platform or GENERIC_PLATFORM).lower()

        cache_key = (str(config_dir), platform)
        if cache_key in cls._cache:
            return cls._cache[cache_key]

        base_config = cls._load_base_config(config_dir)

        if platform == GENERIC_PLATFORM:
            config = cls._load_platform_yaml(config_dir, GENERIC_PLATFORM, base_config, fallback=None)
        else:
            generic = cls.load(GENERIC_PLATFORM, config_dir)
            platform_file = config_dir / platform / "parsing.yaml"
            if not platform_file.exists():
                logger.warning(
                    f"[ConfigLoader] Конфиг для '{platform}' не найден, используем {GENERIC_PLATFORM}"
                )
                config = generic
            else:
                config = cls._load_platform_yaml(config_dir, platform, base_config, fallback=generic)

        cls._cache[cache_key] = config

        logger.debug(
            f"[ConfigLoader] Загружен PlatformConfig для {platform}: "
            + ", ".join(f"{name}={len(config.patterns_for(name))}" for name in EXTRACTION_FIELDS)
        )
        return config

    @classmethod
    def _read_yaml(cls, path: Path) -> dict:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ParsingConfigurationError(
                f"Некорректный YAML: {path}", component="ConfigLoader", original_error=e
            )
        if not isinstance(data, dict):
            raise ParsingConfigurationError(
                f"Ожидался словарь на верхнем уровне: {path}", component="ConfigLoader"
            )
        return data

    @classmethod
    def _load_base_config(cls, config_dir: Path) -> dict:
        """Загружает общие группы паттернов из base.yaml."""
        base_file = config_dir / "base.yaml"

        if not base_file.exists():
            logger.warning(f"[ConfigLoader] base.yaml не найден: {base_file}")
            return {}

        return cls._read_yaml(base_file)

    @classmethod
    def _resolve_extends(cls, value: Any, base_config: dict, _depth: int = 0) -> Any:
        """
        Разворачивает наследование через $extends внутри списков.
        Поддерживает форматы:
        - Строка: "$extends: key"
        - Словарь: {"$extends": "key"} (автоматически из YAML без кавычек)

        Унаследованные списки тоже могут содержать $extends (глубина ограничена).
        """
        if not isinstance(value, list):
            return value

        result = []
        for item in value:
            extended_key = None

            # Case 1: String "$extends: key"
            if isinstance(item, str) and item.startswith("$extends:"):
                extended_key = item.split(":", 1)[1].strip()

            # Case 2: Dict {"$extends": "key"}
            elif isinstance(item, dict) and "$extends" in item:
                extended_key = item["$extends"]

            if extended_key is None:
                result.append(item)
                continue

            extended = base_config.get(extended_key, [])
            if not extended or not isinstance(extended, list):
                logger.warning(f"[ConfigLoader] Ключ '{extended_key}' для $extends не найден в base.yaml")
                continue
            if _depth >= 5:
                logger.warning(f"[ConfigLoader] Слишком глубокая цепочка $extends на '{extended_key}'")
                continue

            logger.trace(f"[ConfigLoader] Inheriting {len(extended)} items for '{extended_key}'")
            result.extend(cls._resolve_extends(extended, base_config, _depth + 1))

        return result

    @classmethod
    def _load_platform_yaml(
        cls,
        config_dir: Path,
        platform: str,
        base_config: dict,
        fallback: Optional["PlatformConfig"],
    ) -> "PlatformConfig":
        """Загружает конфиг платформы из YAML файла."""
        config_file = config_dir / platform / "parsing.yaml"

        if not config_file.exists():
            raise PlatformConfigNotFoundError(
                f"Конфиг для {platform} не найден: {config_file}", component="ConfigLoader"
            )

        config_data = cls._read_yaml(config_file)

        declared = config_data.get("platform", platform)
        if str(declared).lower() != platform:
            logger.warning(f"[ConfigLoader] {config_file}: platform='{declared}', ожидалось '{platform}'")

        values: Dict[str, Any] = {"platform": platform}
        for name in EXTRACTION_FIELDS:
            raw = cls._resolve_extends(config_data.get(name), base_config)
            if raw:
                # Стабильная сортировка: при равной specificity решает порядок в YAML
                try:
                    patterns = [ExtractionPattern.model_validate(p) for p in raw]
                except ValidationError as e:
                    raise InvalidPatternError(
                        f"Невалидный паттерн поля {name} ({platform}): {config_file}",
                        component="ConfigLoader",
                        original_error=e,
                    )
                patterns.sort(key=lambda p: p.specificity, reverse=True)
                values[name] = tuple(patterns)
            elif fallback is not None:
                values[name] = fallback.patterns_for(name)

        status_raw = cls._resolve_extends(config_data.get("status_keywords"), base_config)
        if status_raw:
            values["status_keywords"] = status_raw
        elif fallback is not None:
            values["status_keywords"] = fallback.status_keywords

        # Удаление хвостов платформенное: от generic не наследуется
        values["trailing_removals"] = tuple(
            cls._resolve_extends(config_data.get("trailing_removals"), base_config) or ()
        )

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ParsingConfigurationError(
                f"Невалидный конфиг платформы {platform}: {config_file}",
                component="ConfigLoader",
                original_error=e,
            )


# Aliases and wrapper
class ConfigLoader:
    """
    Загрузчик конфигураций.
    Обертка над PlatformConfig.load для совместимости с DI.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir

    def load(self, platform: str) -> PlatformConfig:
        return PlatformConfig.load(platform, self.config_dir)
