"""Application configuration with Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EpubCleanConfig(BaseSettings):
    """Application configuration with environment variable support.

    Configuration can be set via:
    1. Environment variables (prefixed with EPUBCLEAN_)
    2. .env file
    3. Direct instantiation

    Example:
        export EPUBCLEAN_EXTRACT_ROOT=/tmp/epubs
        export EPUBCLEAN_LOG_LEVEL=DEBUG

        config = EpubCleanConfig()
        print(config.extract_root)  # /tmp/epubs
    """

    model_config = SettingsConfigDict(
        env_prefix="EPUBCLEAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Paths
    extract_root: Path = Field(
        default=Path("extracted"),
        description="Directory under which each archive is extracted to <base-name>/",
    )

    # Cover service
    cover_service_url: str = Field(
        default="https://covers.openlibrary.org/b/isbn",
        description="Cover image service prefix; requests go to <prefix>/<isbn>-L.jpg",
    )
    min_cover_bytes: int = Field(
        default=1000,
        ge=0,
        description="Responses smaller than this are the service's 'no cover' placeholder",
    )

    # Content
    markup_extensions: tuple[str, ...] = Field(
        default=(".html", ".xhtml", ".htm"),
        description="Extensions of markup files to sanitize and decode",
    )
    stylesheet_extensions: tuple[str, ...] = Field(
        default=(".css",), description="Extensions of stylesheet files to delete"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    def working_dir_for(self, epub_path: Path) -> Path:
        """Return the Working Directory for ``epub_path`` (extension stripped)."""
        return self.extract_root / Path(epub_path).stem
