import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from loguru import logger

from config.settings import AMOUNT_FRACTION_DIGITS


class AmountParser:
    """
    Элемент-функция: Нормализует захваченную сумму в Decimal.

    Индийский формат: "," - только разделитель групп (1,299.00 / 1,00,000),
    "." - десятичная точка. Отрицательных сумм в письмах нет.
    """

    def __init__(self, fraction_digits: int = AMOUNT_FRACTION_DIGITS):
        self.fraction_digits = fraction_digits
        self.amount_pattern = re.compile(
            r'^\d+(?:\.\d{%d})?$' % fraction_digits if fraction_digits > 0 else r'^\d+$'
        )

    def parse(self, raw: str) -> Optional[Decimal]:
        """
        ЦКП: Сумма (Decimal, >= 0) или None.

        Args:
            raw: Захват группы паттерна, например "1,299.00"

        Returns:
            Decimal: Сумма или None, если строка не является суммой
        """
        if not raw:
            return None

        clean = raw.strip().replace(",", "")

        if not self.amount_pattern.match(clean):
            logger.trace(f"[AmountParser] Не сумма: {raw!r}")
            return None

        try:
            return Decimal(clean)
        except InvalidOperation:
            logger.warning(f"[AmountParser] Ошибка нормализации суммы: {raw!r}")
            return None
