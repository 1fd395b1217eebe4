"""Shared pytest fixtures and configuration for epubclean tests."""

import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from epubclean.models import EpubCleanConfig


CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

CONTENT_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="bookid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
    <dc:title>Test Book</dc:title>
    <dc:identifier id="bookid">urn:uuid:1234</dc:identifier>
    <dc:identifier opf:scheme="ISBN">0-19-853453-1</dc:identifier>
    <meta name="cover" content="cover-img"/>
  </metadata>
  <manifest>
    <item id="chapter1" href="chapter1.xhtml" media-type="application/xhtml+xml"/>
    <item id="style" href="style.css" media-type="text/css"/>
    <item id="cover-img" href="images/cover.jpg" media-type="image/jpeg"/>
  </manifest>
  <spine>
    <itemref idref="chapter1"/>
  </spine>
</package>
"""

CHAPTER_XHTML = """<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
<head>
  <title>Chapter 1</title>
  <link rel="stylesheet" type="text/css" href="style.css"/>
</head>
<body class="calibre">
  <h1 class="title" style="color: red">Chapter 1</h1>
  <p class="para"><span class="c1">Hello</span>, <span><span>world</span></span>!</p>
  <p>Caf&#xe9; &amp; cr&#232;me</p>
</body>
</html>
"""


@pytest.fixture
def config(tmp_path) -> EpubCleanConfig:
    """Configuration that extracts below the test's temporary directory."""
    return EpubCleanConfig(extract_root=tmp_path / "extracted")


@pytest.fixture
def sample_files() -> dict[str, bytes]:
    """Entries of a small EPUB with classes, a stylesheet and a cover."""
    return {
        "mimetype": b"application/epub+zip",
        "META-INF/container.xml": CONTAINER_XML.encode("utf-8"),
        "OEBPS/content.opf": CONTENT_OPF.encode("utf-8"),
        "OEBPS/chapter1.xhtml": CHAPTER_XHTML.encode("utf-8"),
        "OEBPS/style.css": b"p { color: red; }\n",
        "OEBPS/images/cover.jpg": b"\xff\xd8\xff\xe0original-cover",
    }


@pytest.fixture
def make_epub(tmp_path) -> Callable[..., Path]:
    """Factory writing an EPUB from a name -> bytes mapping.

    ``mimetype`` is written last and deflated on purpose, so repacking
    tests can show that entry order is fixed by the writer.
    """

    def _make(files: dict[str, bytes], name: str = "book.epub") -> Path:
        epub_path = tmp_path / name
        with zipfile.ZipFile(epub_path, "w", zipfile.ZIP_DEFLATED) as epub:
            for arcname, data in files.items():
                if arcname != "mimetype":
                    epub.writestr(arcname, data)
            if "mimetype" in files:
                epub.writestr("mimetype", files["mimetype"])
        return epub_path

    return _make


@pytest.fixture
def sample_epub(make_epub, sample_files) -> Path:
    """The sample EPUB written to ``tmp_path/book.epub``."""
    return make_epub(sample_files)


@pytest.fixture
def extracted_dir(tmp_path, sample_files) -> Path:
    """The sample EPUB laid out as an already-extracted directory."""
    root = tmp_path / "extracted" / "book"
    for arcname, data in sample_files.items():
        path = root / arcname
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return root


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
