"""
Stage 7: Platform Post-Processing

ЦКП: CleanedText без промо-хвостов конкретной платформы.

Входные данные: CleanedText (Stage 5) + Platform
Выходные данные: PlatformResult (уточнённый текст)

Список удалений берётся из <platform>/parsing.yaml (trailing_removals).
Для generic и неизвестных платформ - тождественное преобразование.
"""

from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from contracts.order_record_dto import Platform

from ..platforms.config_loader import ConfigLoader
from .stage_3_whitespace import normalize_whitespace


@dataclass
class PlatformResult:
    """Результат Stage 7: Platform Post-Processing."""
    text: str
    platform: str = Platform.GENERIC.value
    removals_applied: int = 0

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "platform": self.platform,
            "removals_applied": self.removals_applied,
        }


class PlatformStage:
    """
    Stage 7: Platform Post-Processing.

    ЦКП: Удаление loyalty/membership промо конкретного магазина.
    """

    def __init__(self, config_loader: Optional[ConfigLoader] = None):
        self.config_loader = config_loader or ConfigLoader()

    def process(self, text: str, platform: Union[str, Platform, None] = None) -> PlatformResult:
        resolved = Platform.resolve(platform)
        config = self.config_loader.load(resolved.value)

        if not config.trailing_removals:
            return PlatformResult(text=text, platform=config.platform)

        removals_applied = 0
        for pattern in config.removal_patterns:
            text, count = pattern.subn("", text)
            removals_applied += count

        text = normalize_whitespace(text)

        logger.debug(f"[Stage 7: Platform] {config.platform}: удалено фрагментов {removals_applied}")

        return PlatformResult(text=text, platform=config.platform, removals_applied=removals_applied)
