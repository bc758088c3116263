"""Parsed document views and the per-run document cache."""

from .cache import DocumentCache
from .view import ParsedDocumentView

__all__ = ["DocumentCache", "ParsedDocumentView"]
