"""
epubclean CLI module.

This module provides the Click-based command-line interface for epubclean.
"""

from .commands import cli


__all__ = ["cli"]
