"""
Rich-based logging for epubclean.

This module configures terminal log output using the Rich library.
"""

from .constants import EMOJI_MAP
from .rich_logger import (
    EmojiLoggerAdapter,
    get_logger,
    get_valid_log_levels,
    setup_rich_logger,
)


__all__ = [
    "EMOJI_MAP",
    "EmojiLoggerAdapter",
    "get_logger",
    "get_valid_log_levels",
    "setup_rich_logger",
]
