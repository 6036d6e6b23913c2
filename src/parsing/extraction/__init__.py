"""
Extraction модуль: атомарные валидаторы захваченных значений.

Используются Stage 6 для проверки совпадений паттернов.
"""

from .amount_parser import AmountParser
from .date_parser import DeliveryDateParser

__all__ = [
    "AmountParser",
    "DeliveryDateParser",
]
