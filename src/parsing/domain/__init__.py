"""
Domain слой домена Parsing.

Содержит исключения домена Parsing.
"""

from .exceptions import (
    ParsingError,
    ParsingConfigurationError,
    PlatformConfigNotFoundError,
    InvalidPatternError,
)

__all__ = [
    "ParsingError",
    "ParsingConfigurationError",
    "PlatformConfigNotFoundError",
    "InvalidPatternError",
]
