"""Markup sanitizer for extracted EPUB content.

Every XHTML file is parsed as strict XML, stripped of ``class`` and
``style`` attributes and stylesheet links, has attribute-less ``<span>``
wrappers unwrapped, and is written back in place. Stylesheet files are then
removed from the manifest and deleted.
"""

from dataclasses import dataclass, field
from pathlib import Path

from lxml import etree

from ..display import get_logger
from ..epub.package import remove_manifest_items
from ..models import EpubCleanConfig
from ..utils.exceptions import FilesystemError, MalformedInputError, NotFoundError
from ..utils.files import find_files


STRIPPED_ATTRIBUTES = ("class", "style")

logger = get_logger("Sanitizer")


@dataclass
class CleanResult:
    """Summary of a ``clean_epub`` run."""

    cleaned_files: list[Path] = field(default_factory=list)
    deleted_stylesheets: list[Path] = field(default_factory=list)
    removed_manifest_items: int = 0


def _append_text(parent: etree._Element, previous: etree._Element | None, text: str) -> None:
    """Attach ``text`` after ``previous`` (or at the start of ``parent``)."""
    if not text:
        return
    if previous is not None:
        previous.tail = (previous.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def remove_element(element: etree._Element) -> None:
    """Remove ``element`` from its parent, keeping the text that follows it."""
    parent = element.getparent()
    if parent is None:
        return
    previous = element.getprevious()
    tail = element.tail or ""
    parent.remove(element)
    _append_text(parent, previous, tail)


def unwrap_element(element: etree._Element) -> None:
    """Replace ``element`` with its children, spliced at its position."""
    parent = element.getparent()
    if parent is None:
        return

    previous = element.getprevious()
    index = parent.index(element)
    children = list(element)
    leading = element.text or ""
    trailing = element.tail or ""

    if children:
        last = children[-1]
        last.tail = (last.tail or "") + trailing
    else:
        leading += trailing

    parent.remove(element)
    for offset, child in enumerate(children):
        parent.insert(index + offset, child)
    _append_text(parent, previous, leading)


def strip_attributes(root: etree._Element, names: tuple[str, ...] = STRIPPED_ATTRIBUTES) -> int:
    """Remove the named attributes from every element. Returns the count removed."""
    removed = 0
    for element in root.iter(etree.Element):
        for name in names:
            if name in element.attrib:
                del element.attrib[name]
                removed += 1
    return removed


def is_stylesheet_link(element: etree._Element) -> bool:
    return element.get("rel") == "stylesheet" or (element.get("href") or "").endswith(".css")


def remove_stylesheet_links(root: etree._Element) -> int:
    """Remove ``<link>`` elements pointing at stylesheets."""
    links = [link for link in root.iter("{*}link") if is_stylesheet_link(link)]
    for link in links:
        remove_element(link)
    return len(links)


def collapse_bare_spans(root: etree._Element) -> int:
    """
    Unwrap ``<span>`` elements without attributes until none remain.

    Each round removes at least one element, so the loop terminates.
    """
    collapsed = 0
    while True:
        bare = [
            span
            for span in root.iter("{*}span")
            if not span.attrib and span.getparent() is not None
        ]
        if not bare:
            return collapsed
        for span in bare:
            unwrap_element(span)
        collapsed += len(bare)


def sanitize_tree(root: etree._Element) -> etree._Element:
    """Apply every sanitizing rewrite to ``root`` in place and return it."""
    strip_attributes(root)
    remove_stylesheet_links(root)
    collapse_bare_spans(root)
    return root


def parse_markup(markup: str | bytes) -> etree._ElementTree:
    """
    Parse XHTML in strict XML mode.

    Raises:
        MalformedInputError: If the markup is not well-formed
    """
    if isinstance(markup, str):
        markup = markup.encode("utf-8")
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)
    try:
        return etree.fromstring(markup, parser).getroottree()
    except etree.XMLSyntaxError as e:
        raise MalformedInputError(f"Malformed markup: {e}") from e


def sanitize_markup(markup: str | bytes) -> str:
    """Sanitize an XHTML document held in memory and return the serialized result."""
    tree = parse_markup(markup)
    sanitize_tree(tree.getroot())
    return etree.tostring(tree, encoding="unicode")


def clean_markup_file(markup_path: Path | str) -> None:
    """
    Sanitize a single XHTML file and overwrite it.

    Raises:
        MalformedInputError: If the file is not well-formed XML
    """
    markup_path = Path(markup_path)
    try:
        tree = parse_markup(markup_path.read_bytes())
    except MalformedInputError as e:
        raise MalformedInputError(f"{markup_path}: {e}") from e

    sanitize_tree(tree.getroot())
    tree.write(str(markup_path), encoding="utf-8", xml_declaration=True)
    logger.info(f"Cleaned: {markup_path}")


def clean_epub(epub_dir: Path | str, config: EpubCleanConfig | None = None) -> CleanResult:
    """
    Clean an extracted EPUB directory.

    Sanitizes every markup file, removes stylesheet entries from the
    manifest, then deletes the stylesheet files themselves.

    Args:
        epub_dir: Directory containing extracted EPUB contents
        config: Application configuration

    Returns:
        Summary of cleaned and deleted files

    Raises:
        NotFoundError: If ``epub_dir`` does not exist
        MalformedInputError: On the first markup or package file that cannot be parsed
        FilesystemError: If a stylesheet cannot be deleted
    """
    config = config or EpubCleanConfig()
    epub_dir = Path(epub_dir)
    if not epub_dir.is_dir():
        raise NotFoundError(f"Directory not found: {epub_dir}")

    result = CleanResult()

    markup_files = find_files(epub_dir, config.markup_extensions)
    logger.info(f"Found {len(markup_files)} HTML files")

    for markup_file in markup_files:
        clean_markup_file(markup_file)
        result.cleaned_files.append(markup_file)

    css_files = find_files(epub_dir, config.stylesheet_extensions)
    logger.info(f"Found {len(css_files)} CSS files to delete")

    # Manifest paths are computed while the files still exist
    if css_files:
        result.removed_manifest_items = remove_manifest_items(epub_dir, css_files)

    for css_file in css_files:
        try:
            css_file.unlink()
        except OSError as e:
            raise FilesystemError(f"Failed to delete {css_file}: {e}") from e
        result.deleted_stylesheets.append(css_file)
        logger.info(f"Deleted: {css_file}")

    logger.info("Cleaning complete!")
    return result
