"""Async HTTP client for the cover image service."""

import re
from pathlib import Path
from typing import Any

import httpx

from ..display import get_logger
from ..models import EpubCleanConfig
from ..utils.exceptions import FilesystemError, TransportError


logger = get_logger("Cover")


class CoverClient:
    """Async HTTP client that downloads book covers by ISBN.

    Each fetch is a single GET request with no retries. The service answers
    unknown ISBNs with a tiny placeholder image (about 43 bytes), so any
    response smaller than ``config.min_cover_bytes`` counts as "not found".

    Example:
        async with CoverClient(config) as client:
            found = await client.fetch_cover("978-0-19-853453-1", Path("cover.jpg"))
    """

    def __init__(self, config: EpubCleanConfig | None = None, **client_kwargs: Any):
        """Initialize the async HTTP client.

        Args:
            config: Application configuration
            **client_kwargs: Extra arguments for ``httpx.AsyncClient``
        """
        self._config = config or EpubCleanConfig()
        self._client = httpx.AsyncClient(follow_redirects=True, **client_kwargs)

    async def __aenter__(self) -> "CoverClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        await self._client.aclose()

    def cover_url(self, isbn: str) -> str:
        """Build the large-cover URL for ``isbn`` (hyphens and whitespace stripped)."""
        clean_isbn = re.sub(r"[-\s]", "", isbn)
        return f"{self._config.cover_service_url.rstrip('/')}/{clean_isbn}-L.jpg"

    async def fetch_cover(self, isbn: str, output_path: Path | str) -> bool:
        """Fetch a book cover and save it to ``output_path``.

        Args:
            isbn: ISBN-10 or ISBN-13
            output_path: Path to save the cover image (overwritten on success)

        Returns:
            True if a cover was found and saved, False otherwise

        Raises:
            TransportError: On network/connection errors
            FilesystemError: If the image cannot be written
        """
        url = self.cover_url(isbn)
        logger.info(f"Fetching cover from: {url}")

        try:
            response = await self._client.get(url)
        except httpx.TransportError as e:
            raise TransportError(f"Cover request failed for {url}: {e}") from e

        if not response.is_success:
            logger.info(f"Cover fetch failed: HTTP {response.status_code}")
            return False

        minimum = self._config.min_cover_bytes
        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) < minimum:
            logger.info("Cover not found (placeholder image returned)")
            return False

        # The header may be missing or wrong; check the payload itself too
        content = response.content
        if len(content) < minimum:
            logger.info("Cover not found (placeholder image returned)")
            return False

        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(content)
        except OSError as e:
            raise FilesystemError(f"Failed to write cover to {output_path}: {e}") from e

        logger.info(f"Cover saved to: {output_path}")
        return True


async def fetch_cover(
    isbn: str, output_path: Path | str, config: EpubCleanConfig | None = None
) -> bool:
    """Fetch a single cover with a short-lived client."""
    async with CoverClient(config) as client:
        return await client.fetch_cover(isbn, output_path)
