"""
Stage 1: Encoding Normalization

ЦКП: Текст письма с исправленными типовыми поломками кодировки (mojibake).

Входные данные: сырой HTML письма (str)
Выходные данные: EncodingResult (текст + какие замены сработали)

Алгоритм:
1. Последовательные литеральные замены по таблице ENCODING_REPLACEMENTS
2. Порядок таблицы = контракт: сначала triple-encoded, потом double-encoded,
   потом одиночный mojibake, в самом конце валютные эвристики

Это НЕ декодер кодировок, а набор эвристик для писем индийских магазинов.
Замены "Rs." / "INR" приблизительные: границы слов не проверяются.

Таблица устойчива: ни один выход правила не содержит вход другого правила,
поэтому повторный прогон ничего не меняет.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from loguru import logger


# Порядок важен: ключ с меньшим индексом никогда не является подстрокой
# ключа с большим индексом (иначе короткое правило испортит длинную последовательность).
ENCODING_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    # --- Triple-encoded (UTF-8 -> cp1252 три раза) ---
    ("ÃƒÂ¢Ã¢â€šÂ¬Ã¢â€žÂ¢", "'"),
    ("ÃƒÂ¢Ã¢â€šÂ¬Ã…\"", '"'),
    ("ÃƒÂ¢Ã¢â€šÂ¬", '"'),
    # --- Double-encoded ---
    ("Ã¢â€šÂ¹", "₹"),
    ("Ã¢â‚¬â„¢", "'"),
    ("Ã¢â€™", "'"),
    ("Ã¢â€œ", '"'),
    ("Ã¢â€¦", "..."),
    ("Ã¢â€", '"'),
    # --- Single mojibake ---
    ("â‚¹", "₹"),
    ("â‚¨", "₹"),
    ("â€™", "'"),
    ("â€˜", "'"),
    ("â€œ", '"'),
    ("â€\x9d", '"'),
    ("â€¦", "..."),
    ("â€“", "–"),
    ("â€”", "—"),
    ("â€", '"'),
    # --- Битые ссылки на символ рупии ---
    ("&#8377;", "₹"),
    # --- Валютные эвристики (lossy) ---
    ("Rs.", "₹"),
    ("Rs ", "₹ "),
    ("INR", "₹"),
    # "&₹" последним: ловит результат любого рупийного правила выше
    ("&₹", "₹"),
)


@dataclass
class EncodingResult:
    """
    Результат Stage 1: Encoding Normalization.

    ЦКП: Текст с исправленной кодировкой.
    """
    text: str
    replacements: List[str] = field(default_factory=list)  # Сработавшие ключи таблицы

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "replacements": self.replacements,
        }


class EncodingStage:
    """
    Stage 1: Encoding Normalization.

    ЦКП: Исправление mojibake и нормализация символа рупии.
    """

    def __init__(self, replacements: Tuple[Tuple[str, str], ...] = ENCODING_REPLACEMENTS):
        self.replacements = replacements

    def process(self, text: str) -> EncodingResult:
        applied = []
        for broken, fixed in self.replacements:
            if broken in text:
                text = text.replace(broken, fixed)
                applied.append(broken)

        if applied:
            logger.debug(f"[Stage 1: Encoding] Исправлено последовательностей: {len(applied)}")

        return EncodingResult(text=text, replacements=applied)


def fix_encoding(text: str) -> str:
    """Применяет таблицу замен за один проход."""
    return EncodingStage().process(text).text
