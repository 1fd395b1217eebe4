"""Constants for the Rich logging setup."""

# Emoji prefixes for pipeline steps
EMOJI_MAP = {
    "extract": "📦",
    "cover": "🖼️",
    "decode": "🔤",
    "clean": "🧹",
    "pack": "📚",
    "cleanup": "🗑️",
    "complete": "✓",
    "warning": "⚠️",
}

# Log format
LOG_FORMAT = "%(message)s"
FILE_LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%d/%b/%Y %H:%M:%S"

ROOT_LOGGER_NAME = "EpubClean"
