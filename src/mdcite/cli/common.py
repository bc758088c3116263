"""Shared setup for the command-line entry points."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from mdcite.config import CiteSettings
from mdcite.service import CitationService

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FATAL = 2


def load_settings(scope: str | None = None) -> CiteSettings:
    """Read settings from the environment and configure stderr logging."""

    settings = CiteSettings.from_env()
    logging.basicConfig(format=LOG_FORMAT, level=settings.log_level)
    if scope:
        settings = replace(settings, scope=Path(scope))
    return settings


def build_service(settings: CiteSettings) -> CitationService:
    return CitationService(settings)


def print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))
