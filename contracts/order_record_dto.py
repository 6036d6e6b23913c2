"""
DTO контракт: Parsing -> Order Persistence

Результат разбора письма-уведомления о заказе.
Каждое поле либо отсутствует (None), либо содержит ровно одно валидное значение.
Строк-заглушек вида "Unknown" нет: отсутствие поля - единственный сигнал "нет данных".

ВАЖНО: Внешние потребители получают camelCase ключи через to_external_dict().
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Platform(str, Enum):
    """
    Платформа-отправитель письма.

    Выбирает, какие списки паттернов применяются. Неизвестная платформа -> GENERIC.
    """

    AMAZON = "amazon"
    FLIPKART = "flipkart"
    MYNTRA = "myntra"
    SWIGGY = "swiggy"
    BLINKIT = "blinkit"
    GENERIC = "generic"

    @classmethod
    def resolve(cls, value: "Optional[str | Platform]") -> "Platform":
        """Приводит произвольное значение к Platform (fallback на GENERIC)."""
        if isinstance(value, Platform):
            return value
        if not value:
            return cls.GENERIC
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.GENERIC


class OrderStatus(str, Enum):
    """Статус заказа, определённый по ключевым словам письма."""

    ORDERED = "ordered"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class StructuredOrderRecord(BaseModel):
    """
    Структурированные факты о заказе, извлечённые из письма.

    Передаётся во внешний слой сохранения заказов: присутствующие поля
    маппятся на атрибуты заказа, отсутствующие не трогаются.
    """

    order_id: Optional[str] = Field(None, description="Идентификатор заказа платформы")
    amount: Optional[Decimal] = Field(None, ge=0, description="Сумма заказа")
    product_name: Optional[str] = Field(None, description="Название товара")
    expected_delivery: Optional[date] = Field(None, description="Ожидаемая дата доставки")
    carrier_name: Optional[str] = Field(None, description="Служба доставки")
    tracking_id: Optional[str] = Field(None, description="Трек-номер / AWB")

    model_config = ConfigDict(
        frozen=True,
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @field_validator("order_id", "product_name", "carrier_name", "tracking_id")
    @classmethod
    def validate_text_fields(cls, v: Optional[str]) -> Optional[str]:
        # Пустая строка - это тоже "нет данных"
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and not v.is_finite():
            raise ValueError("Amount must be a finite number")
        return v

    @property
    def is_empty(self) -> bool:
        """True, если извлечение ничего не дало (результат неубедительный)."""
        return all(value is None for value in self.model_dump().values())

    def to_external_dict(self) -> Dict[str, Any]:
        """Словарь с camelCase ключами, только присутствующие поля."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
