"""
Stage 6: Structured Extraction

ЦКП: StructuredOrderRecord - факты о заказе из очищенного текста.

Входные данные: CleanedText (Stage 5) + Platform
Выходные данные: ExtractionResult (record, статус, confidence, сработавшие паттерны)

Алгоритм (для каждого поля):
1. Упорядоченный список паттернов платформы из ConfigLoader
   (generic, если у платформы нет своего списка или платформа неизвестна)
2. Для каждого паттерна берётся только его первое совпадение
3. Первое совпадение, прошедшее валидацию поля, выигрывает (first-match-wins)
   - amount: AmountParser (Decimal >= 0, не более 2 знаков после точки)
   - expected_delivery: DeliveryDateParser (реальная календарная дата)
   - остальные: trim захвата

Дополнительно (диагностика / bulk):
- extract_order_ids: все совпадения всех паттернов, без дублей, в порядке появления
- extract_amounts: все суммы, без дублей и нулей, по убыванию

СИСТЕМНЫЙ ПРИНЦИП:
- 0 хардкода паттернов в Python коде, все списки в platforms/*.yaml
- Порядок списка = контракт
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger

from config.settings import CONFIDENCE_WEIGHTS, LOG_PREVIEW_CHARS
from contracts.order_record_dto import OrderStatus, Platform, StructuredOrderRecord

from ..extraction.amount_parser import AmountParser
from ..extraction.date_parser import DeliveryDateParser
from ..platforms.config_loader import EXTRACTION_FIELDS, ConfigLoader, ExtractionPattern, PlatformConfig


@dataclass
class AmountCandidate:
    """Сумма из режима extract_amounts."""
    amount: Decimal
    raw: str        # Захват группы как есть ("1,299.00")
    context: str    # Всё совпадение паттерна ("Amount Paid: ₹1,299.00")

    def to_dict(self) -> dict:
        return {
            "amount": str(self.amount),
            "raw": self.raw,
            "context": self.context,
        }


@dataclass
class ExtractionResult:
    """
    Результат Stage 6: Structured Extraction.

    ЦКП: Запись о заказе + диагностика.
    """
    record: StructuredOrderRecord
    platform: str = Platform.GENERIC.value
    status: OrderStatus = OrderStatus.ORDERED
    status_detected: bool = False                               # False = статус по умолчанию
    confidence: float = 0.0
    matched_patterns: Dict[str, str] = field(default_factory=dict)  # поле -> описание паттерна

    def to_dict(self) -> dict:
        return {
            "record": self.record.to_external_dict(),
            "platform": self.platform,
            "status": self.status.value,
            "status_detected": self.status_detected,
            "confidence": self.confidence,
            "matched_patterns": self.matched_patterns,
        }


class ExtractionStage:
    """
    Stage 6: Structured Extraction.

    ЦКП: Извлечение полей заказа по упорядоченным спискам паттернов.
    """

    def __init__(
        self,
        config_loader: Optional[ConfigLoader] = None,
        amount_parser: Optional[AmountParser] = None,
        date_parser: Optional[DeliveryDateParser] = None,
    ):
        """
        Args:
            config_loader: Загрузчик конфигов платформ (platforms/*.yaml)
            amount_parser: Валидатор суммы
            date_parser: Валидатор даты доставки
        """
        self.config_loader = config_loader or ConfigLoader()
        self.amount_parser = amount_parser or AmountParser()
        self.date_parser = date_parser or DeliveryDateParser()

    def _get_config(self, platform: Union[str, Platform, None]) -> PlatformConfig:
        return self.config_loader.load(Platform.resolve(platform).value)

    def process(self, text: str, platform: Union[str, Platform, None] = None) -> ExtractionResult:
        """
        Извлекает поля заказа из очищенного текста.

        Args:
            text: CleanedText (результат Stage 5)
            platform: Платформа (неизвестная -> generic)

        Returns:
            ExtractionResult: Запись о заказе (пустая, если ничего не нашлось)
        """
        config = self._get_config(platform)
        logger.debug(f"[Stage 6: Extraction] Платформа {config.platform}, текст {len(text)} символов")

        values: Dict[str, Any] = {}
        matched: Dict[str, str] = {}

        for field_name in EXTRACTION_FIELDS:
            value, pattern = self.extract_field(text, field_name, config)
            if value is not None:
                values[field_name] = value
                matched[field_name] = pattern.description or pattern.pattern

        record = StructuredOrderRecord(**values)
        status, status_detected = self.detect_status(text, config)
        confidence = self._calculate_confidence(record, status_detected)

        logger.debug(
            f"[Stage 6: Extraction] Найдено полей: {len(values)}/{len(EXTRACTION_FIELDS)}, "
            f"status={status.value}, confidence={confidence}"
        )

        return ExtractionResult(
            record=record,
            platform=config.platform,
            status=status,
            status_detected=status_detected,
            confidence=confidence,
            matched_patterns=matched,
        )

    def extract_field(
        self,
        text: str,
        field_name: str,
        config: PlatformConfig,
    ) -> Tuple[Optional[Any], Optional[ExtractionPattern]]:
        """
        Первое валидное значение поля по упорядоченному списку паттернов.

        Returns:
            (значение, сработавший паттерн) или (None, None)
        """
        for pattern in config.patterns_for(field_name):
            match = pattern.regex.search(text)
            if not match:
                continue

            raw = match.group(pattern.group)
            value = self._validate(field_name, raw)
            if value is None:
                logger.trace(
                    f"[Stage 6: Extraction] {field_name}: '{raw}' не прошло валидацию "
                    f"({pattern.description or pattern.pattern[:LOG_PREVIEW_CHARS]})"
                )
                continue

            logger.trace(f"[Stage 6: Extraction] {field_name} = {value!r} ({pattern.description})")
            return value, pattern

        return None, None

    def _validate(self, field_name: str, raw: Optional[str]) -> Optional[Any]:
        if raw is None:
            return None
        if field_name == "amount":
            return self.amount_parser.parse(raw)
        if field_name == "expected_delivery":
            return self.date_parser.parse(raw)
        value = raw.strip()
        return value or None

    def detect_status(self, text: str, config: PlatformConfig) -> Tuple[OrderStatus, bool]:
        """
        Статус заказа по ключевым словам (первое правило из списка выигрывает).

        Returns:
            (статус, найден ли по ключевому слову)
        """
        lower_text = text.lower()
        for rule in config.status_keywords:
            for keyword in rule.keywords:
                if keyword in lower_text:
                    return rule.status, True
        return OrderStatus.ORDERED, False

    def _calculate_confidence(self, record: StructuredOrderRecord, status_detected: bool) -> float:
        score = 0.0
        if record.order_id:
            score += CONFIDENCE_WEIGHTS["order_id"]
        if record.amount is not None and record.amount > 0:
            score += CONFIDENCE_WEIGHTS["amount"]
        if record.product_name:
            score += CONFIDENCE_WEIGHTS["product_name"]
        if status_detected:
            score += CONFIDENCE_WEIGHTS["status"]
        if record.tracking_id or record.carrier_name:
            score += CONFIDENCE_WEIGHTS["shipment"]
        return round(min(score, 1.0), 2)

    def extract_order_ids(self, text: str, platform: Union[str, Platform, None] = None) -> List[str]:
        """Все order id по всем паттернам: без дублей, в порядке первого появления."""
        config = self._get_config(platform)
        order_ids: List[str] = []

        for pattern in config.order_id:
            for match in pattern.regex.finditer(text):
                raw = match.group(pattern.group)
                value = raw.strip() if raw else ""
                if value and value not in order_ids:
                    order_ids.append(value)

        logger.debug(f"[Stage 6: Extraction] extract_order_ids: {len(order_ids)}")
        return order_ids

    def extract_amounts(self, text: str, platform: Union[str, Platform, None] = None) -> List[AmountCandidate]:
        """
        Все суммы по всем паттернам.

        Дубли (по буквальному захвату), нули и неразбираемые значения отбрасываются.
        Сортировка по убыванию суммы (стабильная): первая - вероятный итог заказа.
        """
        config = self._get_config(platform)
        seen = set()
        candidates: List[AmountCandidate] = []

        for pattern in config.amount:
            for match in pattern.regex.finditer(text):
                raw = match.group(pattern.group)
                if not raw or raw in seen:
                    continue
                seen.add(raw)

                amount = self.amount_parser.parse(raw)
                if amount is None or amount == 0:
                    continue
                candidates.append(AmountCandidate(amount=amount, raw=raw, context=match.group(0)))

        candidates.sort(key=lambda c: c.amount, reverse=True)

        logger.debug(f"[Stage 6: Extraction] extract_amounts: {len(candidates)}")
        return candidates


def extract_order_ids(text: str, platform: Union[str, Platform, None] = None) -> List[str]:
    return ExtractionStage().extract_order_ids(text, platform)


def extract_amounts(text: str, platform: Union[str, Platform, None] = None) -> List[AmountCandidate]:
    return ExtractionStage().extract_amounts(text, platform)
