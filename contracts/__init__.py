"""
Контракты DTO проекта Order Mail Parser.

Все контракты используют Pydantic v2 для валидации.

Контракты:
- Caller -> Parsing: Platform (order_record_dto.py)
- Parsing -> Order Persistence: StructuredOrderRecord (order_record_dto.py)
"""

from .order_record_dto import OrderStatus, Platform, StructuredOrderRecord

__all__ = [
    "Platform",
    "OrderStatus",
    "StructuredOrderRecord",
]
