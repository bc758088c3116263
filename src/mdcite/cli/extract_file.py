"""CLI entrypoint for extracting a whole markdown file."""

from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv

from mdcite.cli.common import EXIT_FAILED, EXIT_FATAL, EXIT_OK, build_service, load_settings, print_json
from mdcite.errors import CitationError, PathResolutionFailure
from mdcite.extraction.models import ExtractionResult

load_dotenv()

logger = logging.getLogger(__name__)


async def _extract(args: argparse.Namespace) -> ExtractionResult:
    service = build_service(load_settings(args.scope))
    return await service.extract_file(args.file)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract the full content of a markdown file")
    parser.add_argument("file", help="Target markdown file")
    parser.add_argument("--scope", default=None, help="Folder indexed for filename fallback resolution")
    args = parser.parse_args(argv)

    try:
        result = asyncio.run(_extract(args))
    except PathResolutionFailure as exc:
        logger.error("%s", exc)
        if exc.suggestion:
            logger.error("Suggestion: %s", exc.suggestion)
        return EXIT_FAILED
    except (CitationError, ValueError) as exc:
        logger.error("Extraction failed: %s", exc)
        return EXIT_FATAL

    print_json(result.to_dict())
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
