"""
Stage 5: General Cleanup (Garbage Filter)

ЦКП: Читаемый текст письма без служебного мусора (CleanedText).

Входные данные: текст после Stage 4 (Entities)
Выходные данные: CleanupResult (текст + статистика удалённых строк)

Алгоритм:
1. Документ целиком: удаление хвостов строк с boilerplate (футеры, отписка,
   "Track your order"), URL, утёкших src=/href=, доменов магазинов,
   noreply-адресов, одиночных < и >
2. Построчно: trim, удаление пустых строк и строк, похожих на мусор (is_garbage_line)
3. Повторная нормализация пробелов (правила Stage 3)

ПРИНЦИП: сомнительную строку лучше оставить, чем потерять название товара.
"""

import re
from dataclasses import dataclass
from typing import Tuple

from loguru import logger

from config.settings import LOG_PREVIEW_CHARS
from .stage_3_whitespace import normalize_whitespace


# =============================================================================
# Документ целиком (MULTILINE: ".*$" = до конца строки)
# =============================================================================
BOILERPLATE_TAIL_PATTERNS: Tuple["re.Pattern[str]", ...] = tuple(
    re.compile(p, re.MULTILINE) for p in (
        r'This email was sent from a notification-only address.*$',
        r'Please do not reply to this message.*$',
        r'Got Questions\? Please get in touch.*$',
        r'24x7 Customer Care.*$',
        r'Customer Care.*$',
        r'Read More.*$',
        r'Unsubscribe.*$',
        r'Track your (?:Order|Shipment|Package).*$',
        r'Manage Your Order.*$',
        r'View (?:Order|Invoice).*$',
    )
)

LEAKED_MARKUP_PATTERNS: Tuple["re.Pattern[str]", ...] = (
    re.compile(r'(?:src|href)="[^"\n]*"', re.IGNORECASE),
    re.compile(r"(?:src|href)='[^'\n]*'", re.IGNORECASE),
    re.compile(r'https?://\S+'),
    re.compile(r'\b(?:amazon|flipkart|myntra|nykaa)\.(?:com|in)\S*', re.IGNORECASE),
    re.compile(r'\b(?:auto-confirm|noreply|no-reply|donotreply)@[\w.\-]*', re.IGNORECASE),
    # Остатки разметки (в т.ч. из декодированных &lt; &gt;)
    re.compile(r'[<>]'),
)

# =============================================================================
# Построчный фильтр
# =============================================================================
GARBAGE_LINE_PATTERNS: Tuple["re.Pattern[str]", ...] = (
    re.compile(r'^[\s\-_=.]{3,}$'),
    re.compile(r'^(?:width|height|margin|padding|font(?:-\w+)?|color|border|background)\s*:', re.IGNORECASE),
    re.compile(r'^(?:img|div|span|table|td|tr)$', re.IGNORECASE),
    re.compile(r'^https?://'),
    re.compile(r'^[a-f0-9]{20,}$', re.IGNORECASE),
    re.compile(r'^[\d\s.,;:-]+$'),
    re.compile(r'\b(?:amazon|flipkart|myntra|nykaa)\.(?:com|in)\b', re.IGNORECASE),
    re.compile(r'notification-only|customer care|unsubscribe', re.IGNORECASE),
    re.compile(r'track\s+(?:order|shipment|package)', re.IGNORECASE),
    re.compile(r'manage\s+(?:order|account)', re.IGNORECASE),
    re.compile(r'view\s+(?:order|invoice)', re.IGNORECASE),
    re.compile(r'download\s+(?:the\s+)?(?:app|invoice)', re.IGNORECASE),
    re.compile(r'^\s*(?:terms|privacy|policy)\s*$', re.IGNORECASE),
    re.compile(r'^\s*(?:copyright|all rights reserved)\s*$', re.IGNORECASE),
)


def is_garbage_line(line: str) -> bool:
    """True, если строка - мусор (CSS, URL, hex, boilerplate, одна пунктуация)."""
    line = line.strip()
    if not line:
        return True
    return any(pattern.search(line) for pattern in GARBAGE_LINE_PATTERNS)


@dataclass
class CleanupResult:
    """
    Результат Stage 5: General Cleanup.

    ЦКП: CleanedText - вход для Stage 6 (Extraction) и Stage 7 (Platform).
    """
    text: str
    lines_kept: int = 0
    lines_dropped: int = 0

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "lines_kept": self.lines_kept,
            "lines_dropped": self.lines_dropped,
        }


class CleanupStage:
    """
    Stage 5: General Cleanup.

    ЦКП: Удаление boilerplate и мусорных строк.
    """

    def process(self, text: str) -> CleanupResult:
        for pattern in BOILERPLATE_TAIL_PATTERNS:
            text = pattern.sub("", text)

        for pattern in LEAKED_MARKUP_PATTERNS:
            text = pattern.sub("", text)

        kept = []
        dropped = 0
        for line in text.split("\n"):
            line = line.strip()
            if not line:
                continue
            if is_garbage_line(line):
                dropped += 1
                logger.trace(f"[Stage 5: Cleanup] Мусор: {line[:LOG_PREVIEW_CHARS]}")
                continue
            kept.append(line)

        text = normalize_whitespace("\n".join(kept))

        logger.debug(f"[Stage 5: Cleanup] Строк: kept={len(kept)}, dropped={dropped}")

        return CleanupResult(text=text, lines_kept=len(kept), lines_dropped=dropped)
