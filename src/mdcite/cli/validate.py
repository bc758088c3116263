"""CLI entrypoint for validating every citation in a markdown file."""

from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv

from mdcite.cli.common import EXIT_FAILED, EXIT_FATAL, EXIT_OK, build_service, load_settings, print_json
from mdcite.errors import CitationError
from mdcite.validation.models import EnrichedLinkReference, ValidationResult

load_dotenv()

logger = logging.getLogger(__name__)

_SECTIONS = (("error", "ERRORS"), ("warning", "WARNINGS"), ("valid", "VALID"))


def _describe(link: EnrichedLinkReference) -> list[str]:
    lines = [f"  Line {link.line}: {link.full_match}"]
    outcome = link.validation
    if outcome.message:
        lines.append(f"    {outcome.message}")
    if outcome.suggestion:
        lines.append(f"    Suggestion: {outcome.suggestion}")
    if outcome.path_conversion:
        lines.append(f"    Use: {outcome.path_conversion.recommended}")
    return lines


def format_report(result: ValidationResult) -> str:
    summary = result.summary
    lines = [
        f"Citation validation report for {result.file}",
        "",
        (
            f"Summary: {summary.total} links, {summary.valid} valid, "
            f"{summary.warnings} warnings, {summary.errors} errors"
        ),
    ]
    for status, title in _SECTIONS:
        matching = [link for link in result.links if link.validation.status == status]
        if not matching:
            continue
        lines.extend(["", f"{title} ({len(matching)})"])
        for link in matching:
            lines.extend(_describe(link))
    return "\n".join(lines)


async def _validate(args: argparse.Namespace) -> ValidationResult:
    service = build_service(load_settings(args.scope))
    result = await service.validate_document(args.file)
    if args.lines:
        result = service.filter_by_line_range(result, args.lines)
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate markdown citations and their anchors")
    parser.add_argument("file", help="Markdown file to validate")
    parser.add_argument("--scope", default=None, help="Folder indexed for filename fallback resolution")
    parser.add_argument("--format", choices=("cli", "json"), default="cli", help="Output format")
    parser.add_argument("--lines", default=None, help="Only report links within START-END lines")
    args = parser.parse_args(argv)

    try:
        result = asyncio.run(_validate(args))
    except (CitationError, ValueError) as exc:
        logger.error("Validation failed: %s", exc)
        return EXIT_FATAL

    if args.format == "json":
        print_json(result.to_dict())
    else:
        print(format_report(result))
    return EXIT_FAILED if result.summary.errors else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
