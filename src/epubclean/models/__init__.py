"""Data models for epubclean."""

from .config import EpubCleanConfig
from .package import Identifier, ManifestItem, PackageInfo


__all__ = [
    "EpubCleanConfig",
    "Identifier",
    "ManifestItem",
    "PackageInfo",
]
