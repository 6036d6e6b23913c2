"""
Stage 2: Tag Stripping

ЦКП: Текст без HTML разметки с сохранённой структурой строк.

Входные данные: текст после Stage 1 (Encoding)
Выходные данные: TagsResult (текст без тегов)

Алгоритм:
1. Удаление невидимого контента: <script>, <style>, <noscript>, HTML и CSS комментарии
2. Блочные теги (br, p, div, h1-h6, li, tr) -> перевод строки, ячейки (td, th) -> пробел
3. Спасение текста: alt у <img>, текст ссылок <a> и <span>
4. Любой оставшийся тег -> пробел

Время работы линейно по длине входа:
- невидимые блоки ищутся последовательным сканом opener -> closer,
  незакрытый <script>/<style>/<noscript>/<!-- скрывает остаток документа;
- тело тега = [^<>], поэтому незакрытый "<" не пересканирует хвост письма.

Сущности (&lt; и т.п.) здесь НЕ декодируются: это Stage 4.
"""

import re
from dataclasses import dataclass
from typing import Tuple

from loguru import logger


# Невидимый контент: (opener, closer, незакрытый блок скрывает остаток документа)
INVISIBLE_BLOCKS: Tuple[Tuple["re.Pattern[str]", "re.Pattern[str]", bool], ...] = (
    (re.compile(r'<script\b', re.IGNORECASE), re.compile(r'</script\s*>', re.IGNORECASE), True),
    (re.compile(r'<style\b', re.IGNORECASE), re.compile(r'</style\s*>', re.IGNORECASE), True),
    (re.compile(r'<noscript\b', re.IGNORECASE), re.compile(r'</noscript\s*>', re.IGNORECASE), True),
    (re.compile(r'<!--'), re.compile(r'-->'), True),
    # Незакрытый "/*" в тексте письма - не комментарий
    (re.compile(r'/\*'), re.compile(r'\*/'), False),
)

# (паттерн, замена) в порядке применения
STRUCTURE_RULES: Tuple[Tuple["re.Pattern[str]", str], ...] = (
    (re.compile(r'<br\s*/?>', re.IGNORECASE), "\n"),
    (re.compile(r'</?(?:p|div|h[1-6]|li|tr)\b[^<>]*>', re.IGNORECASE), "\n"),
    (re.compile(r'</?(?:td|th)\b[^<>]*>', re.IGNORECASE), " "),
)

IMG_TAG_PATTERN = re.compile(r'<img\b[^<>]*>', re.IGNORECASE)
ALT_ATTR_PATTERN = re.compile(r'\balt="([^"]*)"', re.IGNORECASE)


def _salvage_alt(match: "re.Match[str]") -> str:
    alt = ALT_ATTR_PATTERN.search(match.group(0))
    return f" {alt.group(1)} " if alt else " "


# Полезный текст внутри тегов (названия товаров часто лежат в alt картинки)
SALVAGE_RULES = (
    (IMG_TAG_PATTERN, _salvage_alt),
    (re.compile(r'<a\b[^<>]*>([^<]*)</a\s*>', re.IGNORECASE), r" \1 "),
    (re.compile(r'<span\b[^<>]*>([^<]*)</span\s*>', re.IGNORECASE), r" \1 "),
)

ANY_TAG_PATTERN = re.compile(r'<[^<>]+>')


def remove_blocks(
    text: str,
    opener: "re.Pattern[str]",
    closer: "re.Pattern[str]",
    drop_unclosed: bool = True,
) -> Tuple[str, int]:
    """
    Удаляет блоки opener...closer одним проходом слева направо.

    Returns:
        (текст, число удалённых блоков)
    """
    parts = []
    pos = 0
    removed = 0

    while True:
        start = opener.search(text, pos)
        if start is None:
            parts.append(text[pos:])
            break

        end = closer.search(text, start.end())
        if end is None:
            # Закрывающего разделителя дальше нет ни для одного opener
            if drop_unclosed:
                parts.append(text[pos:start.start()])
                removed += 1
            else:
                parts.append(text[pos:])
            break

        parts.append(text[pos:start.start()])
        removed += 1
        pos = end.end()

    return "".join(parts), removed


@dataclass
class TagsResult:
    """
    Результат Stage 2: Tag Stripping.

    ЦКП: Текст без разметки.
    """
    text: str
    removed_invisible: int = 0   # Удалено блоков script/style/комментариев
    removed_tags: int = 0        # Удалено прочих тегов

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "removed_invisible": self.removed_invisible,
            "removed_tags": self.removed_tags,
        }


class TagsStage:
    """
    Stage 2: Tag Stripping.

    ЦКП: Удаление разметки без потери видимого текста.
    """

    def process(self, text: str) -> TagsResult:
        removed_invisible = 0
        for opener, closer, drop_unclosed in INVISIBLE_BLOCKS:
            text, count = remove_blocks(text, opener, closer, drop_unclosed)
            removed_invisible += count

        for pattern, replacement in STRUCTURE_RULES:
            text = pattern.sub(replacement, text)

        for pattern, replacement in SALVAGE_RULES:
            text = pattern.sub(replacement, text)

        text, removed_tags = ANY_TAG_PATTERN.subn(" ", text)

        logger.debug(
            f"[Stage 2: Tags] Удалено: invisible={removed_invisible}, tags={removed_tags}"
        )

        return TagsResult(
            text=text,
            removed_invisible=removed_invisible,
            removed_tags=removed_tags,
        )


def strip_tags(text: str) -> str:
    """Удаляет разметку (Stage 2 без метрик)."""
    return TagsStage().process(text).text
