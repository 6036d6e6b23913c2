#!/usr/bin/env python3
"""
Точка входа для домена Parsing (разбор HTML письма о заказе).

Использование:
    # Разобрать письмо (платформа generic)
    python scripts/parse_email.py path/to/email.html

    # Указать платформу
    python scripts/parse_email.py path/to/email.html --platform flipkart

    # Полный отладочный дамп всех этапов
    python scripts/parse_email.py path/to/email.html --platform amazon --debug
"""

import sys
import argparse
import json
from pathlib import Path

from loguru import logger

# Добавляем корень проекта в путь
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import DEFAULT_PLATFORM, LOG_LEVEL
from contracts.order_record_dto import Platform
from src.parsing.domain.exceptions import ParsingConfigurationError
from src.parsing.stages.pipeline import EmailParsingPipeline


def main():
    """Главная функция запуска разбора письма."""
    parser = argparse.ArgumentParser(description="Order Mail Parser")
    parser.add_argument("path", help="Путь к HTML файлу письма")
    parser.add_argument(
        "--platform",
        default=DEFAULT_PLATFORM,
        choices=[p.value for p in Platform],
        help="Платформа-отправитель (по умолчанию generic)",
    )
    parser.add_argument("--debug", action="store_true", help="Вывести PipelineResult целиком")
    args = parser.parse_args()

    html_path = Path(args.path)
    if not html_path.is_file():
        print(f"[ERROR] Файл не найден: {html_path}")
        sys.exit(1)

    html = html_path.read_text(encoding="utf-8", errors="replace")

    try:
        result = EmailParsingPipeline().process(html, args.platform)
    except ParsingConfigurationError as e:
        print(f"[ERROR] {e}")
        sys.exit(2)

    if args.debug:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2, default=str))
        return

    print("=" * 60)
    print(result.cleaned_text)
    print("=" * 60)
    print(json.dumps(result.record.to_external_dict(), ensure_ascii=False, indent=2))
    print(f"status={result.extraction.status.value} confidence={result.extraction.confidence}")


if __name__ == "__main__":
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=LOG_LEVEL
    )

    main()
