"""
Package metadata document (content.opf) lookup, parsing and manifest cleanup.
"""

import os
import re
from collections.abc import Iterable
from pathlib import Path

from lxml import etree

from ..display import get_logger
from ..models import Identifier, ManifestItem, PackageInfo
from ..utils.exceptions import MalformedInputError


CONTAINER_PATH = Path("META-INF") / "container.xml"
FALLBACK_PACKAGE_PATHS = ("content.opf", "OEBPS/content.opf", "OPS/content.opf")
OPF_NAMESPACE = "http://www.idpf.org/2007/opf"

# ISBN-13 (starts with 978 or 979) or ISBN-10
ISBN_PATTERN = re.compile(r"^(97[89])?\d{9}[\dX]$")
ISBN_STRIP_PATTERN = re.compile(r"[-\s]")

logger = get_logger("Package")


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True)


def _parse_xml(path: Path) -> etree._ElementTree:
    """Parse ``path`` as strict XML, raising MalformedInputError on failure."""
    try:
        return etree.parse(str(path), _xml_parser())
    except etree.XMLSyntaxError as e:
        raise MalformedInputError(f"Malformed XML in {path}: {e}") from e


def _rootfile_from_container(epub_dir: Path) -> Path | None:
    container = epub_dir / CONTAINER_PATH
    if not container.is_file():
        return None

    try:
        tree = _parse_xml(container)
    except MalformedInputError:
        logger.warning(f"Could not parse {container}, probing conventional locations")
        return None

    for rootfile in tree.getroot().iter("{*}rootfile"):
        full_path = rootfile.get("full-path")
        if full_path:
            return epub_dir / full_path
    return None


def locate_package_document(epub_dir: Path | str) -> Path | None:
    """
    Find the package metadata document of an extracted EPUB.

    ``META-INF/container.xml`` is consulted first; when it is missing,
    unparsable or points nowhere, the conventional locations are probed.

    Args:
        epub_dir: Directory containing extracted EPUB contents

    Returns:
        Path of the package document, or None if none exists
    """
    epub_dir = Path(epub_dir)

    candidate = _rootfile_from_container(epub_dir)
    if candidate is not None and candidate.is_file():
        return candidate

    for relative in FALLBACK_PACKAGE_PATHS:
        candidate = epub_dir / relative
        if candidate.is_file():
            return candidate

    return None


def read_package(opf_path: Path | str) -> PackageInfo:
    """
    Read identifiers, manifest items and the cover reference from a package document.

    Raises:
        MalformedInputError: If the document is not well-formed XML
    """
    opf_path = Path(opf_path)
    root = _parse_xml(opf_path).getroot()

    identifiers = [
        Identifier(
            value=(element.text or "").strip(),
            scheme=element.get(f"{{{OPF_NAMESPACE}}}scheme") or element.get("scheme"),
        )
        for element in root.iter("{*}identifier")
    ]

    manifest = [
        ManifestItem(
            id=item.get("id", ""),
            href=item.get("href", ""),
            media_type=item.get("media-type"),
            properties=(item.get("properties") or "").split(),
        )
        for item in root.iter("{*}item")
        if item.get("href")
    ]

    cover_id = None
    for meta in root.iter("{*}meta"):
        if meta.get("name") == "cover" and meta.get("content"):
            cover_id = meta.get("content")
            break

    return PackageInfo(path=opf_path, identifiers=identifiers, manifest=manifest, cover_id=cover_id)


def extract_isbn_from_text(text: str) -> str | None:
    """
    Extract an ISBN from a string, handling hyphens, spaces and a lowercase 'x'.

    Returns:
        Cleaned ISBN-10 or ISBN-13, or None if not valid
    """
    cleaned = ISBN_STRIP_PATTERN.sub("", text).upper()
    if ISBN_PATTERN.match(cleaned):
        return cleaned
    return None


def extract_isbn(package: PackageInfo) -> str | None:
    """Return the first identifier that is a valid ISBN, preferring ``scheme="isbn"``."""
    # sorted() is stable, so document order is kept within each group
    candidates = sorted(package.identifiers, key=lambda ident: not ident.is_isbn_scheme)
    for identifier in candidates:
        isbn = extract_isbn_from_text(identifier.value)
        if isbn:
            return isbn
    return None


def resolve_cover_path(package: PackageInfo) -> Path | None:
    """
    Resolve the cover image declared by a package document.

    The ``<meta name="cover">`` reference wins; otherwise a manifest item
    with id ``cover`` or with the ``cover-image`` property is used.
    """
    item = package.get_item(package.cover_id) if package.cover_id else None

    if item is None:
        item = package.get_item("cover")
    if item is None:
        item = next((i for i in package.manifest if "cover-image" in i.properties), None)
    if item is None:
        return None

    return package.base_dir / item.href


def _stylesheet_hrefs(opf_path: Path, css_files: Iterable[Path]) -> set[str]:
    hrefs: set[str] = set()
    for css_file in css_files:
        relative = os.path.relpath(css_file, opf_path.parent)
        hrefs.add(relative)
        hrefs.add(relative.replace("\\", "/"))
    return hrefs


def remove_manifest_items(epub_dir: Path | str, css_files: Iterable[Path | str]) -> int:
    """
    Remove manifest items that reference stylesheets about to be deleted.

    Must run before the stylesheet files are deleted. A missing package
    document is not an error; the step is skipped.

    Args:
        epub_dir: Directory containing extracted EPUB contents
        css_files: Stylesheet paths as found on disk

    Returns:
        Number of manifest items removed

    Raises:
        MalformedInputError: If the package document is not well-formed XML
    """
    opf_path = locate_package_document(epub_dir)
    if opf_path is None:
        logger.info("content.opf not found, skipping OPF cleanup")
        return 0

    hrefs = _stylesheet_hrefs(opf_path, (Path(f) for f in css_files))
    tree = _parse_xml(opf_path)

    removed = 0
    for item in list(tree.getroot().iter("{*}item")):
        if item.get("href") in hrefs:
            parent = item.getparent()
            if parent is None:
                continue
            previous = item.getprevious()
            # Keep the surrounding whitespace layout intact
            if item.tail:
                if previous is not None:
                    previous.tail = item.tail
                else:
                    parent.text = item.tail
            parent.remove(item)
            removed += 1

    tree.write(str(opf_path), encoding="utf-8", xml_declaration=True)
    logger.info(f"Updated {opf_path.name}: removed {removed} stylesheet item(s)")
    return removed
