"""Shared tokenizer contract consumed by the document cache."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from mdcite.parsing.models import RawParseOutput


@runtime_checkable
class DocumentTokenizer(Protocol):
    """Protocol every tokenizer implementation must satisfy."""

    def parse(self, path: str) -> RawParseOutput:
        """Read and tokenize the document at an absolute path.

        Raises ``ParseFailure`` on I/O or decoding problems.
        """
