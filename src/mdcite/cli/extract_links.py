"""CLI entrypoint for extracting deduplicated content behind a file's citations."""

from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv

from mdcite.cli.common import EXIT_FAILED, EXIT_FATAL, EXIT_OK, build_service, load_settings, print_json
from mdcite.errors import CitationError
from mdcite.extraction.models import ExtractionOptions, ExtractionResult

load_dotenv()

logger = logging.getLogger(__name__)


async def _extract(args: argparse.Namespace) -> ExtractionResult:
    settings = load_settings(args.scope)
    service = build_service(settings)
    options = ExtractionOptions(full_files=args.full_files or settings.full_files)
    return await service.extract_from_document(args.file, options)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract content referenced by a markdown file's citations")
    parser.add_argument("file", help="Markdown file whose links are extracted")
    parser.add_argument("--scope", default=None, help="Folder indexed for filename fallback resolution")
    parser.add_argument(
        "--full-files",
        action="store_true",
        help="Also extract whole documents for links without an anchor",
    )
    args = parser.parse_args(argv)

    try:
        result = asyncio.run(_extract(args))
    except (CitationError, ValueError) as exc:
        logger.error("Extraction failed: %s", exc)
        return EXIT_FATAL

    print_json(result.to_dict())
    return EXIT_OK if result.succeeded else EXIT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
