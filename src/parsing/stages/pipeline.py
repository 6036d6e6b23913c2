"""
Email Parsing Pipeline - Оркестратор 7 этапов.

Координирует выполнение всех этапов в строгом порядке:
1. Encoding → 2. Tags → 3. Whitespace → 4. Entities → 5. Cleanup
→ 6. Extraction (по тексту Stage 5) → 7. Platform (уточнение текста Stage 5)

Возвращает PipelineResult: очищенный текст, StructuredOrderRecord
и все промежуточные тексты для отладки.

Пайплайн не бросает исключений из-за содержимого письма: плохой HTML
деградирует до пустого текста и пустой записи. Исключения возможны
только при сломанной конфигурации платформ (ParsingConfigurationError).
"""

import time
from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from config.settings import DEFAULT_PLATFORM, LOG_PREVIEW_CHARS, MAX_HTML_CHARS
from contracts.order_record_dto import Platform, StructuredOrderRecord

from .stage_1_encoding import EncodingStage, EncodingResult
from .stage_2_tags import TagsStage, TagsResult
from .stage_3_whitespace import WhitespaceStage, WhitespaceResult
from .stage_4_entities import EntitiesStage, EntitiesResult
from .stage_5_cleanup import CleanupStage, CleanupResult
from .stage_6_extraction import ExtractionStage, ExtractionResult
from .stage_7_platform import PlatformStage, PlatformResult

# Конфигурационный загрузчик платформ
from ..platforms.config_loader import ConfigLoader


@dataclass
class PipelineResult:
    """
    Полный результат пайплайна со всеми промежуточными данными.

    Используется для отладки и анализа (снимки текста после каждого этапа).
    """
    platform: str

    # Промежуточные результаты этапов
    encoding: Optional[EncodingResult] = None
    tags: Optional[TagsResult] = None
    whitespace: Optional[WhitespaceResult] = None
    entities: Optional[EntitiesResult] = None
    cleanup: Optional[CleanupResult] = None
    extraction: Optional[ExtractionResult] = None
    refined: Optional[PlatformResult] = None

    # Метрики
    input_chars: int = 0
    truncated: bool = False
    processing_time_ms: float = 0.0
    stages_completed: int = 0

    @property
    def cleaned_text(self) -> str:
        """CleanedText (Stage 5)."""
        return self.cleanup.text if self.cleanup else ""

    @property
    def refined_text(self) -> str:
        """Текст после Stage 7 (платформенное уточнение)."""
        return self.refined.text if self.refined else self.cleaned_text

    @property
    def record(self) -> StructuredOrderRecord:
        return self.extraction.record if self.extraction else StructuredOrderRecord()

    def to_dict(self) -> dict:
        return {
            "platform": self.platform,
            "encoding": self.encoding.to_dict() if self.encoding else None,
            "tags": self.tags.to_dict() if self.tags else None,
            "whitespace": self.whitespace.to_dict() if self.whitespace else None,
            "entities": self.entities.to_dict() if self.entities else None,
            "cleanup": self.cleanup.to_dict() if self.cleanup else None,
            "extraction": self.extraction.to_dict() if self.extraction else None,
            "refined": self.refined.to_dict() if self.refined else None,
            "input_chars": self.input_chars,
            "truncated": self.truncated,
            "processing_time_ms": self.processing_time_ms,
            "stages_completed": self.stages_completed,
        }


class EmailParsingPipeline:
    """
    Пайплайн разбора письма-уведомления о заказе.

    Координирует 7 этапов в строгом порядке:
    1. Encoding Normalization
    2. Tag Stripping
    3. Whitespace Normalization
    4. Entity Decoding
    5. General Cleanup
    6. Structured Extraction
    7. Platform Post-Processing

    ЦКП: CleanedText + StructuredOrderRecord.
    """

    def __init__(
        self,
        encoding_stage: Optional[EncodingStage] = None,
        tags_stage: Optional[TagsStage] = None,
        whitespace_stage: Optional[WhitespaceStage] = None,
        entities_stage: Optional[EntitiesStage] = None,
        cleanup_stage: Optional[CleanupStage] = None,
        extraction_stage: Optional[ExtractionStage] = None,
        platform_stage: Optional[PlatformStage] = None,
        config_loader: Optional[ConfigLoader] = None,
        max_html_chars: int = MAX_HTML_CHARS,
    ):
        """
        Инициализация пайплайна.

        Args:
            Все этапы опциональны - по умолчанию создаются стандартные.
            config_loader: Загрузчик конфигов платформ (для Stage 6 и 7)
            max_html_chars: Лимит длины входного HTML
        """
        self.encoding_stage = encoding_stage or EncodingStage()
        self.tags_stage = tags_stage or TagsStage()
        self.whitespace_stage = whitespace_stage or WhitespaceStage()
        self.entities_stage = entities_stage or EntitiesStage()
        self.cleanup_stage = cleanup_stage or CleanupStage()
        self.extraction_stage = extraction_stage or ExtractionStage(config_loader=config_loader)
        self.platform_stage = platform_stage or PlatformStage(config_loader=config_loader)
        self.max_html_chars = max_html_chars

        logger.debug("[EmailParsingPipeline] Инициализирован (7 этапов)")

    def clean(self, html: str) -> PipelineResult:
        """Только Stage 1-5: CleanedText без извлечения."""
        return self._run(html, platform=None, extract=False)

    def process(self, html: str, platform: Union[str, Platform, None] = DEFAULT_PLATFORM) -> PipelineResult:
        """
        Обрабатывает HTML письма через все 7 этапов.

        Args:
            html: Сырой HTML письма (не изменяется)
            platform: Платформа-отправитель (неизвестная -> generic)

        Returns:
            PipelineResult: Полный результат с текстами и записью
        """
        return self._run(html, platform=platform, extract=True)

    def _run(self, html: str, platform: Union[str, Platform, None], extract: bool) -> PipelineResult:
        start_time = time.time()

        resolved = Platform.resolve(platform)
        html = html or ""
        input_chars = len(html)

        truncated = False
        if input_chars > self.max_html_chars:
            logger.warning(
                f"[EmailParsingPipeline] HTML длиннее лимита ({input_chars} > {self.max_html_chars}), обрезаем"
            )
            html = html[:self.max_html_chars]
            truncated = True

        logger.debug(f"[EmailParsingPipeline] Старт обработки: {input_chars} символов, платформа {resolved.value}")

        stages_completed = 0

        # Stage 1: Encoding
        encoding = self.encoding_stage.process(html)
        stages_completed += 1

        # Stage 2: Tags
        tags = self.tags_stage.process(encoding.text)
        stages_completed += 1

        # Stage 3: Whitespace
        whitespace = self.whitespace_stage.process(tags.text)
        stages_completed += 1

        # Stage 4: Entities
        entities = self.entities_stage.process(whitespace.text)
        stages_completed += 1

        # Stage 5: Cleanup
        cleanup = self.cleanup_stage.process(entities.text)
        stages_completed += 1

        extraction = None
        refined = None
        if extract:
            # Stage 6: Extraction (по CleanedText, не по тексту Stage 7)
            extraction = self.extraction_stage.process(cleanup.text, resolved)
            stages_completed += 1

            # Stage 7: Platform
            refined = self.platform_stage.process(cleanup.text, resolved)
            stages_completed += 1

        processing_time_ms = (time.time() - start_time) * 1000

        if extraction is not None:
            logger.info(
                f"[EmailParsingPipeline] Завершено за {processing_time_ms:.1f}ms: "
                f"{resolved.value}, {len(cleanup.text)} символов текста, "
                f"confidence={extraction.confidence}"
            )
        logger.trace(f"[EmailParsingPipeline] CleanedText: {cleanup.text[:LOG_PREVIEW_CHARS]}")

        return PipelineResult(
            platform=resolved.value,
            encoding=encoding,
            tags=tags,
            whitespace=whitespace,
            entities=entities,
            cleanup=cleanup,
            extraction=extraction,
            refined=refined,
            input_chars=input_chars,
            truncated=truncated,
            processing_time_ms=processing_time_ms,
            stages_completed=stages_completed,
        )


def clean_text(html: str) -> str:
    """CleanedText письма (Stage 1-5)."""
    return EmailParsingPipeline().clean(html).cleaned_text


def parse_email(html: str, platform: Union[str, Platform, None] = DEFAULT_PLATFORM) -> StructuredOrderRecord:
    """StructuredOrderRecord письма (все 7 этапов)."""
    return EmailParsingPipeline().process(html, platform).record
