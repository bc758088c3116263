"""Validation outcomes and the enriched link records they produce."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, fields
from typing import Any, Literal

from mdcite.parsing.models import LinkReference, TargetPath

ValidationStatus = Literal["valid", "warning", "error"]
ErrorReason = Literal["not_found", "ambiguous", "anchor_not_found", "parse_failure"]


@dataclass(frozen=True, slots=True)
class PathConversion:
    """Recommended rewrite of a link that resolved through a fallback strategy."""

    original: str
    recommended: str

    def to_dict(self) -> dict[str, str]:
        return {"type": "path-conversion", "original": self.original, "recommended": self.recommended}


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Tagged outcome: ``valid``, or ``warning``/``error`` carrying a message.

    ``reason`` classifies errors that map onto a domain exception; it is the
    field callers dispatch on, never the message wording.
    """

    status: ValidationStatus
    message: str | None = None
    suggestion: str | None = None
    path_conversion: PathConversion | None = None
    reason: ErrorReason | None = None

    def __post_init__(self) -> None:
        if self.status == "valid":
            if self.message or self.suggestion or self.path_conversion or self.reason:
                raise ValueError("valid outcomes carry no message, suggestion, path conversion, or reason")
        elif not self.message:
            raise ValueError(f"{self.status} outcomes require a message")
        if self.status == "warning" and self.reason is not None:
            raise ValueError("only error outcomes carry a reason")

    @classmethod
    def valid(cls) -> "ValidationOutcome":
        return cls(status="valid")

    @classmethod
    def error(
        cls,
        message: str,
        suggestion: str | None = None,
        path_conversion: PathConversion | None = None,
        reason: ErrorReason | None = None,
    ) -> "ValidationOutcome":
        return cls(
            status="error",
            message=message,
            suggestion=suggestion,
            path_conversion=path_conversion,
            reason=reason,
        )

    @classmethod
    def warning(
        cls,
        message: str,
        suggestion: str | None = None,
        path_conversion: PathConversion | None = None,
    ) -> "ValidationOutcome":
        return cls(status="warning", message=message, suggestion=suggestion, path_conversion=path_conversion)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status}
        if self.message:
            payload["message"] = self.message
        if self.suggestion:
            payload["suggestion"] = self.suggestion
        if self.path_conversion:
            payload["pathConversion"] = self.path_conversion.to_dict()
        if self.reason:
            payload["reason"] = self.reason
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class EnrichedLinkReference(LinkReference):
    """A link plus its validation outcome; a new record, never a mutated one."""

    validation: ValidationOutcome

    @classmethod
    def from_link(
        cls,
        link: LinkReference,
        validation: ValidationOutcome,
        *,
        target: TargetPath | None = None,
    ) -> "EnrichedLinkReference":
        values = {item.name: getattr(link, item.name) for item in fields(LinkReference)}
        if target is not None:
            values["target"] = target
        return cls(**values, validation=validation)

    def to_dict(self) -> dict[str, Any]:
        payload = LinkReference.to_dict(self)
        payload["validation"] = self.validation.to_dict()
        return payload


@dataclass(frozen=True, slots=True)
class ValidationSummary:
    total: int
    valid: int
    warnings: int
    errors: int

    @classmethod
    def from_links(cls, links: Iterable[EnrichedLinkReference]) -> "ValidationSummary":
        statuses = [link.validation.status for link in links]
        return cls(
            total=len(statuses),
            valid=statuses.count("valid"),
            warnings=statuses.count("warning"),
            errors=statuses.count("error"),
        )

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "valid": self.valid, "warnings": self.warnings, "errors": self.errors}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Enriched links of one document with a summary derived from them."""

    file: str
    links: tuple[EnrichedLinkReference, ...]

    @property
    def summary(self) -> ValidationSummary:
        return ValidationSummary.from_links(self.links)

    @classmethod
    def from_links(cls, file: str, links: Sequence[EnrichedLinkReference]) -> "ValidationResult":
        return cls(file=file, links=tuple(links))

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "summary": self.summary.to_dict(),
            "links": [link.to_dict() for link in self.links],
        }
