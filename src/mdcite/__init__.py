"""Citation validation and content extraction for markdown documents."""

from .service import CitationService, ExtractionOptions

__all__ = ["CitationService", "ExtractionOptions"]
