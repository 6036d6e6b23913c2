"""
7 этапов пайплайна разбора писем о заказах.

Порядок выполнения строгий:
1. Encoding Normalization - исправление mojibake, символ рупии
2. Tag Stripping - удаление разметки, script/style, спасение alt/ссылок
3. Whitespace Normalization - канонические пробелы и строки
4. Entity Decoding - HTML сущности до неподвижной точки
5. General Cleanup - boilerplate и мусорные строки (CleanedText)
6. Structured Extraction - StructuredOrderRecord по паттернам платформы
7. Platform Post-Processing - промо-хвосты конкретной платформы

Каждый этап имеет:
- Свой ЦКП (Central End Product)
- Единственную ответственность (SRP)
- Результат-dataclass с to_dict() для отладки
"""

from .stage_1_encoding import EncodingStage, EncodingResult, ENCODING_REPLACEMENTS, fix_encoding
from .stage_2_tags import TagsStage, TagsResult, strip_tags
from .stage_3_whitespace import WhitespaceStage, WhitespaceResult, normalize_whitespace
from .stage_4_entities import EntitiesStage, EntitiesResult, NAMED_ENTITIES, decode_entities
from .stage_5_cleanup import CleanupStage, CleanupResult, is_garbage_line
from .stage_6_extraction import (
    ExtractionStage,
    ExtractionResult,
    AmountCandidate,
    extract_order_ids,
    extract_amounts,
)
from .stage_7_platform import PlatformStage, PlatformResult
from .pipeline import EmailParsingPipeline, PipelineResult, clean_text, parse_email

__all__ = [
    # Pipeline
    "EmailParsingPipeline",
    "PipelineResult",
    "clean_text",
    "parse_email",
    # Stage 1
    "EncodingStage",
    "EncodingResult",
    "ENCODING_REPLACEMENTS",
    "fix_encoding",
    # Stage 2
    "TagsStage",
    "TagsResult",
    "strip_tags",
    # Stage 3
    "WhitespaceStage",
    "WhitespaceResult",
    "normalize_whitespace",
    # Stage 4
    "EntitiesStage",
    "EntitiesResult",
    "NAMED_ENTITIES",
    "decode_entities",
    # Stage 5
    "CleanupStage",
    "CleanupResult",
    "is_garbage_line",
    # Stage 6
    "ExtractionStage",
    "ExtractionResult",
    "AmountCandidate",
    "extract_order_ids",
    "extract_amounts",
    # Stage 7
    "PlatformStage",
    "PlatformResult",
]
