"""Shared helpers for epubclean."""
