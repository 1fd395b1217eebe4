"""EPUB container handling for epubclean."""

from .archive import create_epub_zip, extract_epub, working_dir_for
from .package import (
    extract_isbn,
    extract_isbn_from_text,
    locate_package_document,
    read_package,
    remove_manifest_items,
    resolve_cover_path,
)


__all__ = [
    "create_epub_zip",
    "extract_epub",
    "extract_isbn",
    "extract_isbn_from_text",
    "locate_package_document",
    "read_package",
    "remove_manifest_items",
    "resolve_cover_path",
    "working_dir_for",
]
