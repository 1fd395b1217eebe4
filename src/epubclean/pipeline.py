"""
Pipeline orchestration: extract, fetch cover, decode, clean, repack, clean up.
"""

import asyncio
import shutil
from pathlib import Path

from .client import fetch_cover as download_cover
from .display import EmojiLoggerAdapter, get_logger
from .epub import (
    create_epub_zip,
    extract_epub,
    extract_isbn,
    locate_package_document,
    read_package,
    resolve_cover_path,
)
from .models import EpubCleanConfig
from .parser import clean_epub, decode_epub_entities
from .utils.exceptions import FilesystemError, NotFoundError


CLEANED_SUFFIX = ".cleaned.epub"

logger = EmojiLoggerAdapter(get_logger("Pipeline"), {})


def cleaned_output_path(epub_path: Path | str) -> Path:
    """Return the input path with its extension replaced by ``.cleaned.epub``."""
    epub_path = Path(epub_path)
    return epub_path.with_name(f"{epub_path.stem}{CLEANED_SUFFIX}")


def fetch_epub_cover(epub_dir: Path | str, config: EpubCleanConfig | None = None) -> bool:
    """
    Replace the cover image of an extracted EPUB with one fetched by ISBN.

    A missing package document, ISBN or cover path is logged and skipped.

    Returns:
        True if a new cover was written, False otherwise

    Raises:
        NotFoundError: If ``epub_dir`` does not exist
        MalformedInputError: If the package document cannot be parsed
        TransportError: If the cover request fails at the network level
    """
    epub_dir = Path(epub_dir)
    if not epub_dir.is_dir():
        raise NotFoundError(f"Directory not found: {epub_dir}")

    opf_path = locate_package_document(epub_dir)
    if opf_path is None:
        logger.warning(
            "No package document found, skipping cover fetch", extra={"emoji": "warning"}
        )
        return False

    package = read_package(opf_path)

    isbn = extract_isbn(package)
    if isbn is None:
        logger.warning(
            "No ISBN found in package metadata, skipping cover fetch", extra={"emoji": "warning"}
        )
        return False

    cover_path = resolve_cover_path(package)
    if cover_path is None:
        logger.warning(
            "No cover image declared in package metadata, skipping cover fetch",
            extra={"emoji": "warning"},
        )
        return False

    logger.info(f"ISBN {isbn}, cover at {cover_path}")
    found = asyncio.run(download_cover(isbn, cover_path, config))
    if not found:
        logger.info("Keeping the original cover")
    return found


def process_epub(
    epub_path: Path | str,
    fetch_cover: bool = False,
    decode_entities: bool = False,
    keep_extracted: bool = False,
    config: EpubCleanConfig | None = None,
) -> Path:
    """
    Process an EPUB file: extract contents, clean HTML/CSS and create a cleaned EPUB.

    Args:
        epub_path: Path to the EPUB file
        fetch_cover: Replace the cover with one fetched by ISBN
        decode_entities: Decode numeric character references before cleaning
        keep_extracted: Leave the working directory in place afterwards
        config: Application configuration

    Returns:
        Path of the ``<name>.cleaned.epub`` file
    """
    config = config or EpubCleanConfig()

    logger.info("Step 1: Extracting EPUB...", extra={"emoji": "extract"})
    output_dir = extract_epub(epub_path, config)

    if fetch_cover:
        logger.info("Fetching cover...", extra={"emoji": "cover"})
        fetch_epub_cover(output_dir, config)

    if decode_entities:
        logger.info("Decoding numeric character references...", extra={"emoji": "decode"})
        decode_epub_entities(output_dir, config)

    logger.info("Step 2: Cleaning HTML and CSS...", extra={"emoji": "clean"})
    clean_epub(output_dir, config)

    logger.info("Step 3: Creating cleaned EPUB...", extra={"emoji": "pack"})
    output_epub = create_epub_zip(output_dir, cleaned_output_path(epub_path))

    if not keep_extracted:
        logger.info("Step 4: Cleaning up temporary files...", extra={"emoji": "cleanup"})
        try:
            shutil.rmtree(output_dir)
        except OSError as e:
            raise FilesystemError(f"Failed to remove {output_dir}: {e}") from e

    logger.info("Processing complete!", extra={"emoji": "complete"})
    return output_epub
