"""
Домен Parsing: Разбор HTML писем-уведомлений о заказах.

Архитектура: 7-этапный пайплайн
- Stage 1: Encoding (исправление mojibake)
- Stage 2: Tags (удаление разметки)
- Stage 3: Whitespace (нормализация пробелов)
- Stage 4: Entities (декодирование HTML сущностей)
- Stage 5: Cleanup (boilerplate и мусорные строки)
- Stage 6: Extraction (поля заказа по паттернам платформы)
- Stage 7: Platform (промо-хвосты платформы)

Вход: HTML письма (str) + Platform
Выход: CleanedText (str) + contracts.StructuredOrderRecord
"""

from src.parsing.stages.pipeline import (
    EmailParsingPipeline,
    PipelineResult,
    clean_text,
    parse_email,
)
from src.parsing.stages.stage_5_cleanup import is_garbage_line
from src.parsing.stages.stage_6_extraction import extract_amounts, extract_order_ids
from src.parsing.platforms.config_loader import ConfigLoader, PlatformConfig

__all__ = [
    # Pipeline
    "EmailParsingPipeline",
    "PipelineResult",
    "clean_text",
    "parse_email",
    # Extraction
    "extract_order_ids",
    "extract_amounts",
    "is_garbage_line",
    # Config
    "ConfigLoader",
    "PlatformConfig",
]
