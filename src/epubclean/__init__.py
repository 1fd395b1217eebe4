"""epubclean - strip formatting artifacts from EPUB archives."""

__version__ = "1.0.0"
