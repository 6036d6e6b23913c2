"""
Stage 4: Entity Decoding

ЦКП: Текст без HTML сущностей (&amp; &#8377; &#x20B9; ...).

Входные данные: текст после Stage 3 (Whitespace)
Выходные данные: EntitiesResult (декодированный текст + число проходов)

Алгоритм (один проход):
1. Цепочка экранирования "&" (&amp;amp;... / &#38;#38;... / &#x26;...) -> один "&"
2. Именованные сущности из NAMED_ENTITIES
3. Десятичные &#NNN;
4. Шестнадцатеричные &#xHH;

Проходы повторяются, пока текст меняется (не более ENTITY_DECODE_MAX_PASSES),
поэтому повторное декодирование результата ничего не меняет.

Невалидные ссылки (0, суррогаты, > U+10FFFF, слишком длинные) остаются как есть.
"""

import re
from dataclasses import dataclass
from typing import Dict

from loguru import logger

from config.settings import ENTITY_DECODE_MAX_PASSES


# Имя сущности -> символ. nbsp сразу в обычный пробел, hellip в три точки.
NAMED_ENTITIES: Dict[str, str] = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
    "copy": "©",
    "reg": "®",
    "trade": "™",
    "ndash": "–",
    "mdash": "—",
    "hellip": "...",
    "lsquo": "'",
    "rsquo": "'",
    "ldquo": '"',
    "rdquo": '"',
    "cent": "¢",
    "pound": "£",
    "yen": "¥",
    "euro": "€",
}

_NAMED_PATTERN = re.compile(
    r'&(' + "|".join(sorted(NAMED_ENTITIES, key=len, reverse=True)) + r');',
    re.IGNORECASE,
)
# Экранированный "&" в любой записи (&amp; &#38; &#x26;) и любой глубины вложенности
_AMP_CHAIN = re.compile(r'&(?:amp;|#0*38;|#[xX]0*26;)+', re.IGNORECASE)
_DECIMAL_PATTERN = re.compile(r'&#(\d{1,8});')
_HEX_PATTERN = re.compile(r'&#[xX]([0-9a-fA-F]{1,8});')


def _codepoint_to_char(value: int, original: str) -> str:
    if value == 0 or value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        return original
    return chr(value)


def _collapse_amp_chain(text: str) -> str:
    # "&#38;#38;amp;lt;" -> "&lt;": вся цепочка экранирования за один шаг
    return _AMP_CHAIN.sub("&", text)


def _decode_named(text: str) -> str:
    return _NAMED_PATTERN.sub(lambda m: NAMED_ENTITIES[m.group(1).lower()], text)


def _decode_decimal(text: str) -> str:
    return _DECIMAL_PATTERN.sub(lambda m: _codepoint_to_char(int(m.group(1)), m.group(0)), text)


def _decode_hex(text: str) -> str:
    return _HEX_PATTERN.sub(lambda m: _codepoint_to_char(int(m.group(1), 16), m.group(0)), text)


def decode_entities_once(text: str) -> str:
    """Один проход: цепочка &amp; -> named -> decimal -> hex."""
    return _decode_hex(_decode_decimal(_decode_named(_collapse_amp_chain(text))))


@dataclass
class EntitiesResult:
    """
    Результат Stage 4: Entity Decoding.

    ЦКП: Декодированный текст.
    """
    text: str
    passes: int = 0
    converged: bool = True  # False, если упёрлись в лимит проходов

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "passes": self.passes,
            "converged": self.converged,
        }


class EntitiesStage:
    """
    Stage 4: Entity Decoding.

    ЦКП: Замена HTML сущностей символами до неподвижной точки.
    """

    def __init__(self, max_passes: int = ENTITY_DECODE_MAX_PASSES):
        self.max_passes = max_passes

    def process(self, text: str) -> EntitiesResult:
        passes = 0
        converged = False

        while passes < self.max_passes:
            if "&" not in text:
                converged = True
                break
            decoded = decode_entities_once(text)
            passes += 1
            if decoded == text:
                converged = True
                break
            text = decoded

        if not converged:
            logger.warning(
                f"[Stage 4: Entities] Лимит проходов {self.max_passes} исчерпан, "
                f"декодирование не сошлось"
            )
        else:
            logger.debug(f"[Stage 4: Entities] Проходов: {passes}")

        return EntitiesResult(text=text, passes=passes, converged=converged)


def decode_entities(text: str) -> str:
    """Декодирует сущности до неподвижной точки (Stage 4 без метрик)."""
    return EntitiesStage().process(text).text
