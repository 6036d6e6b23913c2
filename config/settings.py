"""
Настройки проекта Order Mail Parser.

Все значения - константы уровня модуля. Переопределяются через переменные окружения
только там, где это явно указано.
"""

import os
from pathlib import Path

# =============================================================================
# ПУТИ ПРОЕКТА
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent

# Директория с YAML конфигами платформ (base.yaml + <platform>/parsing.yaml)
PLATFORMS_CONFIG_DIR = Path(os.getenv(
    "ORDER_MAIL_PLATFORMS_DIR",
    str(PROJECT_ROOT / "src" / "parsing" / "platforms")
))

# =============================================================================
# ЛОГИРОВАНИЕ
# =============================================================================
# Уровень для скриптов (loguru). Библиотечный код сам sinks не настраивает.
LOG_LEVEL = os.getenv("ORDER_MAIL_LOG_LEVEL", "INFO")

# =============================================================================
# ПЛАТФОРМЫ
# =============================================================================
# Платформа по умолчанию, если вызывающая сторона ничего не передала
DEFAULT_PLATFORM = "generic"

# =============================================================================
# ОГРАНИЧЕНИЯ ВХОДА
# =============================================================================
# Максимальная длина HTML (символов). Всё, что длиннее, обрезается с warning.
# Письма-уведомления обычно 20-200 KB, regex-батарея рассчитана на такой размер.
MAX_HTML_CHARS = 2_000_000

# Сколько раз максимум прогонять декодер сущностей до неподвижной точки
ENTITY_DECODE_MAX_PASSES = 8

# Сколько символов строки показывать в debug-логах
LOG_PREVIEW_CHARS = 200

# =============================================================================
# НАСТРОЙКИ EXTRACTION
# =============================================================================
# Форматы даты доставки (strptime). Запятые и лишние пробелы убираются заранее.
DELIVERY_DATE_FORMATS = [
    "%A %B %d %Y",   # Monday March 4 2024
    "%a %b %d %Y",   # Mon Mar 4 2024
    "%A %b %d %Y",   # Monday Mar 4 2024
    "%a %B %d %Y",   # Mon March 4 2024
    "%B %d %Y",      # March 4 2024
    "%b %d %Y",      # Mar 4 2024
    "%A %d %B %Y",   # Monday 4 March 2024
    "%a %d %b %Y",   # Mon 4 Mar 2024
    "%d %B %Y",      # 4 March 2024
    "%d %b %Y",      # 4 Mar 2024
    "%Y-%m-%d",      # 2024-03-04 (ISO)
    "%d/%m/%Y",      # 04/03/2024
    "%d-%m-%Y",      # 04-03-2024
]

# Число знаков после точки в сумме (пайсы): дробная часть либо ровно 2 цифры, либо нет
AMOUNT_FRACTION_DIGITS = 2

# Confidence-веса полей (сумма = 1.0)
CONFIDENCE_WEIGHTS = {
    "order_id": 0.3,
    "amount": 0.3,
    "product_name": 0.2,
    "status": 0.1,
    "shipment": 0.1,
}
