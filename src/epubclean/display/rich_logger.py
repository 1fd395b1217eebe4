"""Rich-based logger configuration for epubclean."""

import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from .constants import DATE_FORMAT, EMOJI_MAP, FILE_LOG_FORMAT, LOG_FORMAT, ROOT_LOGGER_NAME


def setup_rich_logger(
    name: str = ROOT_LOGGER_NAME,
    level: int | str = logging.INFO,
    log_file: Path | str | None = None,
    show_time: bool = True,
    show_path: bool = False,
) -> logging.Logger:
    """
    Set up a Rich-based logger, optionally mirrored to a log file.

    Args:
        name: Logger name
        level: Logging level, as a number or a name such as "DEBUG"
        log_file: Optional path of a file that also receives every record
        show_time: Show timestamp in logs
        show_path: Show file path in logs

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    console = Console(stderr=True)

    rich_handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(name)
    logger.setLevel(level)
    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.addHandler(rich_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger in the epubclean hierarchy.

    Names without the ``EpubClean.`` prefix are placed under it, so
    ``get_logger("Archive")`` returns ``EpubClean.Archive``.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def get_valid_log_levels() -> list[str]:
    """Return a list of valid log level names."""
    return ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EmojiLoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """
    Logger adapter that adds emojis to log messages.

    Usage:
        logger = EmojiLoggerAdapter(get_logger("Pipeline"), {})
        logger.info("Extracting EPUB", extra={"emoji": "extract"})
    """

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:
        """Add an emoji prefix taken from ``extra["emoji"]``."""
        extra = kwargs.get("extra", {})
        emoji_key = extra.pop("emoji", None) if isinstance(extra, dict) else None

        if emoji_key and emoji_key in EMOJI_MAP:
            msg = f"{EMOJI_MAP[emoji_key]} {msg}"

        return msg, kwargs
