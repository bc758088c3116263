"""Synthetic link construction for direct header and file extraction."""

from __future__ import annotations

import os

from mdcite.parsing.models import LinkReference
from mdcite.parsing.links import build_link


def create_header_link(target_path: str, heading: str) -> LinkReference:
    """Build an unvalidated cross-document link to ``target_path#heading``."""

    absolute = os.path.abspath(target_path)
    full_match = f"[{heading}]({os.path.basename(absolute)}#{heading})"
    return build_link(
        syntax="markdown",
        scope="cross-document",
        raw_path=absolute,
        anchor=heading,
        source_path=absolute,
        text=heading,
        full_match=full_match,
        line=0,
        column=0,
    )


def create_file_link(target_path: str) -> LinkReference:
    """Build an unvalidated full-document link to ``target_path``."""

    absolute = os.path.abspath(target_path)
    name = os.path.basename(absolute)
    return build_link(
        syntax="markdown",
        scope="cross-document",
        raw_path=absolute,
        anchor=None,
        source_path=absolute,
        text=name,
        full_match=f"[{name}]({name})",
        line=0,
        column=0,
    )
