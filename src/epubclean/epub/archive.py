"""
EPUB archive handling - extraction to a working directory and repacking.
"""

import os
import zipfile
from pathlib import Path

from ..display import get_logger
from ..models import EpubCleanConfig
from ..utils.exceptions import FilesystemError, MalformedInputError, NotFoundError


MIMETYPE = "mimetype"
META_INF = "META-INF"

logger = get_logger("Archive")


def working_dir_for(epub_path: Path | str, config: EpubCleanConfig | None = None) -> Path:
    """Return ``<extract_root>/<archive base name>`` for ``epub_path``."""
    config = config or EpubCleanConfig()
    return config.working_dir_for(Path(epub_path))


def extract_epub(epub_path: Path | str, config: EpubCleanConfig | None = None) -> Path:
    """
    Extract every entry of an EPUB file into its working directory.

    Existing files with the same relative path are overwritten.

    Args:
        epub_path: Path to the EPUB file
        config: Application configuration

    Returns:
        Path of the working directory

    Raises:
        NotFoundError: If ``epub_path`` does not exist
        MalformedInputError: If the file is not a zip archive
        FilesystemError: If the working directory cannot be written
    """
    epub_path = Path(epub_path)
    if not epub_path.is_file():
        raise NotFoundError(f"EPUB file not found: {epub_path}")

    output_dir = working_dir_for(epub_path, config)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(epub_path) as epub:
            epub.extractall(output_dir)
    except zipfile.BadZipFile as e:
        raise MalformedInputError(f"Not a valid EPUB archive: {epub_path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Failed to extract {epub_path}: {e}") from e

    logger.info(f"Extracted {epub_path} to {output_dir}")
    return output_dir


def _iter_tree(root: Path, start: Path) -> list[Path]:
    """List ``start`` and everything below it, parents before children, sorted."""
    if start.is_file():
        return [start]

    entries = [start] if start != root else []
    for dirpath, dirnames, filenames in os.walk(start):
        dirnames.sort()
        current = Path(dirpath)
        if current != start:
            entries.append(current)
        entries.extend(current / name for name in sorted(filenames))
    return entries


def create_epub_zip(source_dir: Path | str, epub_path: Path | str) -> Path:
    """
    Create an EPUB file from an extracted directory.

    Entry order follows the EPUB container format:

    1. ``mimetype`` first, stored uncompressed (ZIP_STORED), no extra field
    2. the ``META-INF`` tree
    3. everything else, compressed with ZIP_DEFLATED

    An existing file at ``epub_path`` is replaced, never appended to.

    Args:
        source_dir: Directory containing the EPUB contents
        epub_path: Path where the .epub file should be created

    Returns:
        Path of the created archive

    Raises:
        NotFoundError: If ``source_dir`` is not a directory
        FilesystemError: If the archive cannot be written
    """
    source_dir = Path(source_dir)
    epub_path = Path(epub_path)
    if not source_dir.is_dir():
        raise NotFoundError(f"Directory not found: {source_dir}")

    output = epub_path.resolve()
    mimetype_path = source_dir / MIMETYPE
    meta_inf_path = source_dir / META_INF

    try:
        if epub_path.exists():
            epub_path.unlink()

        with zipfile.ZipFile(epub_path, "w") as epub:
            if mimetype_path.is_file():
                epub.write(mimetype_path, MIMETYPE, compress_type=zipfile.ZIP_STORED)

            if meta_inf_path.exists():
                for path in _iter_tree(source_dir, meta_inf_path):
                    epub.write(
                        path,
                        path.relative_to(source_dir).as_posix(),
                        compress_type=zipfile.ZIP_DEFLATED,
                    )

            for path in _iter_tree(source_dir, source_dir):
                arcname = path.relative_to(source_dir)
                if arcname.parts[0] in (MIMETYPE, META_INF):
                    continue
                if path.resolve() == output:
                    continue  # Don't include the epub itself
                epub.write(path, arcname.as_posix(), compress_type=zipfile.ZIP_DEFLATED)
    except OSError as e:
        raise FilesystemError(f"Failed to create {epub_path}: {e}") from e

    logger.info(f"Created EPUB: {epub_path}")
    return epub_path
