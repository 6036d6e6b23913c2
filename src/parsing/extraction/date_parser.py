import re
from datetime import date, datetime
from typing import List, Optional

from loguru import logger

from config.settings import DELIVERY_DATE_FORMATS


class DeliveryDateParser:
    """
    Извлекает дату доставки из захваченной строки.

    Принимает "Friday, March 15, 2024", "15th Mar 2024", "2024-03-15" и т.п.
    Несуществующая дата (31 февраля) -> None: strptime сам проверяет календарь.
    Окно по годам не применяется: результат не зависит от текущей даты.
    """

    _ORDINAL_SUFFIX = re.compile(r'(\d)(?:st|nd|rd|th)\b', re.IGNORECASE)

    def __init__(self, formats: Optional[List[str]] = None):
        self.formats = formats or DELIVERY_DATE_FORMATS

    def parse(self, raw: str) -> Optional[date]:
        if not raw:
            return None

        text = self._normalize(raw)

        for fmt in self.formats:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue

        logger.trace(f"[DeliveryDateParser] Не удалось разобрать дату: {raw!r}")
        return None

    def _normalize(self, raw: str) -> str:
        """'Fri, 15th  Mar, 2024' -> 'Fri 15 Mar 2024'"""
        text = raw.replace(",", " ")
        text = self._ORDINAL_SUFFIX.sub(r"\1", text)
        return " ".join(text.split())
