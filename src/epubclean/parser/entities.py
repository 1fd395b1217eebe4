"""Numeric character reference decoding for extracted EPUB content."""

import re
from pathlib import Path

from ..display import get_logger
from ..models import EpubCleanConfig
from ..utils.exceptions import MalformedEntityError, MalformedInputError, NotFoundError
from ..utils.files import iter_files


# &#xe0; -> à (the hex marker is lowercase only, as in XML)
HEX_REFERENCE = re.compile(r"&#x([0-9a-fA-F]+);")
# &#233; -> é
DECIMAL_REFERENCE = re.compile(r"&#(\d+);")

MAX_CODE_POINT = 0x10FFFF
# 1114111, the largest code point, has seven decimal digits
MAX_SIGNIFICANT_DIGITS = 7
SURROGATES = range(0xD800, 0xE000)

logger = get_logger("Entities")


def _to_char(match: re.Match[str], base: int) -> str:
    reference = match.group(0)
    digits = match.group(1).lstrip("0")
    if len(digits) > MAX_SIGNIFICANT_DIGITS:
        raise MalformedEntityError(f"Invalid character reference {reference[:20]}...")

    code_point = int(digits or "0", base)
    if code_point > MAX_CODE_POINT or code_point in SURROGATES:
        raise MalformedEntityError(f"Invalid character reference {reference}")
    return chr(code_point)


def decode_numeric_entities(content: str) -> str:
    """
    Decode numeric character references (&#xHEX; and &#DEC;) to Unicode.

    Named references such as ``&amp;`` and ``&lt;`` are left untouched.

    Raises:
        MalformedEntityError: If a reference is outside the Unicode range or a surrogate
    """
    result = HEX_REFERENCE.sub(lambda m: _to_char(m, 16), content)
    return DECIMAL_REFERENCE.sub(lambda m: _to_char(m, 10), result)


def decode_file_entities(path: Path) -> bool:
    """Decode references in one file, rewriting it only when the content changes."""
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"{path}: not valid UTF-8 ({e.reason} at byte {e.start})") from e

    try:
        decoded = decode_numeric_entities(text).encode("utf-8")
    except MalformedEntityError as e:
        raise MalformedEntityError(f"{path}: {e}") from e

    if decoded == raw:
        return False

    path.write_bytes(decoded)
    logger.info(f"Decoded: {path}")
    return True


def decode_epub_entities(epub_dir: Path | str, config: EpubCleanConfig | None = None) -> int:
    """
    Decode numeric character references in every markup file of an extracted EPUB.

    Args:
        epub_dir: Directory containing extracted EPUB contents
        config: Application configuration

    Returns:
        Number of files rewritten

    Raises:
        NotFoundError: If ``epub_dir`` does not exist
        MalformedInputError: If a markup file is not valid UTF-8
        MalformedEntityError: On the first invalid reference
    """
    config = config or EpubCleanConfig()
    epub_dir = Path(epub_dir)
    if not epub_dir.is_dir():
        raise NotFoundError(f"Directory not found: {epub_dir}")

    found = 0
    changed = 0
    for markup_file in iter_files(epub_dir, config.markup_extensions):
        found += 1
        if decode_file_entities(markup_file):
            changed += 1

    logger.info(f"Found {found} HTML files")
    logger.info(f"Decoded entities in {changed} file(s)")
    return changed
