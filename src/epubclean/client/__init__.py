"""HTTP client for the cover image service."""

from .http import CoverClient, fetch_cover


__all__ = ["CoverClient", "fetch_cover"]
