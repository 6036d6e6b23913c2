"""
Stage 3: Whitespace Normalization

ЦКП: Текст с каноническими пробелами и переводами строк.

Алгоритм:
1. CRLF / CR -> LF
2. Любая горизонтальная пробельная последовательность -> один пробел
3. Trim каждой строки
4. Несколько пустых строк подряд -> одна пустая строка
5. Trim всего текста

Результат - неподвижная точка: повторная нормализация ничего не меняет.
Функция normalize_whitespace переиспользуется Stage 5 и Stage 7.
"""

import re
from dataclasses import dataclass

from loguru import logger


_NEWLINES = re.compile(r'\r\n?')
_HORIZONTAL_WS = re.compile(r'[^\S\n]+')
_BLANK_RUNS = re.compile(r'\n{3,}')


def normalize_whitespace(text: str) -> str:
    text = _NEWLINES.sub("\n", text)
    text = _HORIZONTAL_WS.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


@dataclass
class WhitespaceResult:
    """Результат Stage 3: Whitespace Normalization."""
    text: str
    line_count: int = 0

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "line_count": self.line_count,
        }


class WhitespaceStage:
    """
    Stage 3: Whitespace Normalization.

    ЦКП: Канонические пробелы (вход для Entity Decoder).
    """

    def process(self, text: str) -> WhitespaceResult:
        text = normalize_whitespace(text)
        line_count = text.count("\n") + 1 if text else 0

        logger.debug(f"[Stage 3: Whitespace] Строк после нормализации: {line_count}")

        return WhitespaceResult(text=text, line_count=line_count)
