from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .violations import ValidationReport


class ReportPageContractError(Exception):
    """Base class for environment and usage errors.

    Schema violations are never raised as this type; they are reported in a
    ValidationReport.
    """


class SchemaNotFoundError(ReportPageContractError):
    """The schema artifact could not be located or read."""


class InvalidSchemaError(ReportPageContractError):
    """The schema artifact is not a valid draft 2020-12 schema."""


class UnsupportedVersionError(ReportPageContractError):
    """A target contract version or selector is not served by this package."""


class ReportPageValidationError(ReportPageContractError):
    """Raised by the asserting helpers when a document is invalid."""

    def __init__(self, report: ValidationReport) -> None:
        self.report = report
        errors = report.errors
        summary = f"{len(errors)} violation(s)"
        if errors:
            first = errors[0]
            summary += f"; first: {first.path or '/'}: {first.message}"
        super().__init__(f"Report page is invalid: {summary}")
