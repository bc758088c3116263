"""Runtime configuration for citation validation and extraction."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping


DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_SUGGESTION_LIMIT = 5
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"", "0", "false", "no", "off"}


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    value = int(raw_value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_bool(*, name: str, raw_value: str) -> bool:
    lowered = raw_value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of: 1, true, yes, on, 0, false, no, off")


@dataclass(frozen=True, slots=True)
class CiteSettings:
    """Validated runtime settings shared by the CLI entry points."""

    scope: Path | None = None
    full_files: bool = False
    log_level: str = DEFAULT_LOG_LEVEL
    suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CiteSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        scope_raw = source.get("MDCITE_SCOPE", "").strip()
        full_files = _parse_bool(name="MDCITE_FULL_FILES", raw_value=source.get("MDCITE_FULL_FILES", "").strip())

        log_level = source.get("MDCITE_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if not log_level:
            raise ValueError("MDCITE_LOG_LEVEL cannot be empty")
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Unknown MDCITE_LOG_LEVEL: {log_level}")

        limit_raw = source.get("MDCITE_SUGGESTION_LIMIT", str(DEFAULT_SUGGESTION_LIMIT)).strip()
        if not limit_raw:
            raise ValueError("MDCITE_SUGGESTION_LIMIT cannot be empty")
        suggestion_limit = _parse_positive_int(name="MDCITE_SUGGESTION_LIMIT", raw_value=limit_raw, minimum=1)

        return cls(
            scope=Path(scope_raw) if scope_raw else None,
            full_files=full_files,
            log_level=log_level,
            suggestion_limit=suggestion_limit,
        )
