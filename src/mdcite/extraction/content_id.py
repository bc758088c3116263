from __future__ import annotations

import hashlib

CONTENT_ID_LENGTH = 16


def generate_content_id(content: str) -> str:
    """Fixed-width identifier: leading hex digits of SHA-256 over the UTF-8 bytes."""

    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:CONTENT_ID_LENGTH]
