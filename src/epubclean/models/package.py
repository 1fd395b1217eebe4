"""Pydantic models for the package metadata document (content.opf)."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Identifier(BaseModel):
    """A ``dc:identifier`` entry."""

    model_config = ConfigDict(frozen=True)

    value: str
    scheme: str | None = None

    @property
    def is_isbn_scheme(self) -> bool:
        return (self.scheme or "").lower() == "isbn"


class ManifestItem(BaseModel):
    """A single ``manifest > item`` entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    href: str
    media_type: str | None = None
    properties: list[str] = Field(default_factory=list)


class PackageInfo(BaseModel):
    """Identifiers, manifest and cover reference read from a package document.

    ``path`` is the location of the document on disk; manifest hrefs are
    relative to its parent directory.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    identifiers: list[Identifier] = Field(default_factory=list)
    manifest: list[ManifestItem] = Field(default_factory=list)
    cover_id: str | None = Field(default=None, description='Content of <meta name="cover">')

    @property
    def base_dir(self) -> Path:
        return self.path.parent

    def get_item(self, item_id: str) -> ManifestItem | None:
        """Look up a manifest item by id."""
        for item in self.manifest:
            if item.id == item_id:
                return item
        return None
