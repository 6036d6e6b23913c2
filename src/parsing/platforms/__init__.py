"""
Конфигурации платформ для домена Parsing.

Содержит:
- base.yaml: общие группы паттернов (подключаются через $extends)
- <platform>/parsing.yaml: паттерны и удаления конкретной платформы
- PlatformConfig / ExtractionPattern: Pydantic модели конфигурации
- ConfigLoader: загрузчик с кешированием
"""

from .config_loader import (
    EXTRACTION_FIELDS,
    GENERIC_PLATFORM,
    ConfigLoader,
    ExtractionPattern,
    PlatformConfig,
    StatusRule,
)

__all__ = [
    "EXTRACTION_FIELDS",
    "GENERIC_PLATFORM",
    "ConfigLoader",
    "ExtractionPattern",
    "PlatformConfig",
    "StatusRule",
]
