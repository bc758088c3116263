"""Markdown tokenizing, link discovery, and anchor discovery."""

from .models import AnchorDefinition, ExtractionMarker, HeadingInfo, LinkReference, RawParseOutput, TargetPath
from .tokenizer import MarkdownTokenizer

__all__ = [
    "AnchorDefinition",
    "ExtractionMarker",
    "HeadingInfo",
    "LinkReference",
    "MarkdownTokenizer",
    "RawParseOutput",
    "TargetPath",
]
