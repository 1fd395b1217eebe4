"""Markup sanitizing and entity decoding for epubclean."""

from .entities import decode_epub_entities, decode_numeric_entities
from .sanitizer import CleanResult, clean_epub, clean_markup_file, sanitize_markup, sanitize_tree


__all__ = [
    "CleanResult",
    "clean_epub",
    "clean_markup_file",
    "decode_epub_entities",
    "decode_numeric_entities",
    "sanitize_markup",
    "sanitize_tree",
]
