from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence


class ViolationCode(str, Enum):
    """Why a document does not satisfy the contract."""

    MISSING_REQUIRED = "missing_required"
    WRONG_TYPE = "wrong_type"
    PATTERN_MISMATCH = "pattern_mismatch"
    ENUM_MISMATCH = "enum_mismatch"
    ARITY = "arity"
    KIND_MISMATCH = "kind_mismatch"
    OUT_OF_RANGE = "out_of_range"
    FORMAT = "format"
    UNSUPPORTED_VERSION = "unsupported_version"
    NEWER_MINOR_VERSION = "newer_minor_version"
    UNKNOWN_FIELD = "unknown_field"
    DEPRECATED_FIELD = "deprecated_field"
    CONSISTENCY = "consistency"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


def escape_pointer_token(token: str | int) -> str:
    return str(token).replace("~", "~0").replace("/", "~1")


def to_pointer(path: Iterable[str | int]) -> str:
    """Render a path as a JSON Pointer (RFC 6901); the root is ``""``."""

    return "".join("/" + escape_pointer_token(p) for p in path)


def to_location(path: Iterable[str | int]) -> str:
    """Render a path for humans, e.g. ``rows[2].visuals``."""

    out = ""
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out or "document"


@dataclass(frozen=True)
class Violation:
    path: str
    code: ViolationCode
    message: str
    severity: Severity = Severity.ERROR

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, str]:
        return {
            "path": self.path,
            "code": self.code.value,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating one document.

    A report is wholly valid or invalid: it is valid iff it holds no
    error-severity violation. Warnings are informational.
    """

    violations: tuple[Violation, ...] = ()
    target_version: str = ""
    document_version: str | None = None

    @classmethod
    def build(
        cls,
        violations: Iterable[Violation],
        *,
        target_version: str,
        document_version: str | None = None,
    ) -> "ValidationReport":
        # Stable order, no duplicates.
        unique = sorted(set(violations), key=_sort_key)
        return cls(
            violations=tuple(unique),
            target_version=target_version,
            document_version=document_version,
        )

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> tuple[Violation, ...]:
        return tuple(v for v in self.violations if v.is_error)

    @property
    def warnings(self) -> tuple[Violation, ...]:
        return tuple(v for v in self.violations if not v.is_error)

    def paths(self, *, severity: Severity | None = Severity.ERROR) -> list[str]:
        return [v.path for v in self.violations if severity is None or v.severity is severity]

    def codes(self, *, severity: Severity | None = Severity.ERROR) -> set[ViolationCode]:
        return {v.code for v in self.violations if severity is None or v.severity is severity}

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "target_version": self.target_version,
            "document_version": self.document_version,
            "errors": [v.to_dict() for v in self.errors],
            "warnings": [v.to_dict() for v in self.warnings],
        }

    def format_text(self, *, prefix: str = "") -> list[str]:
        lines: list[str] = []
        for v in self.violations:
            tag = "" if v.is_error else "warning: "
            lines.append(f"{prefix}{tag}{v.path or '/'}: {v.message} [{v.code.value}]")
        return lines


def _sort_key(v: Violation) -> tuple[Sequence[Any], str, str, str]:
    return (_pointer_sort_parts(v.path), v.code.value, v.message, v.severity.value)


def _pointer_sort_parts(pointer: str) -> list[tuple[int, int, str]]:
    # Numeric segments sort numerically so rows/10 comes after rows/2.
    parts: list[tuple[int, int, str]] = []
    for token in pointer.split("/")[1:]:
        if token.isdigit():
            parts.append((0, int(token), ""))
        else:
            parts.append((1, 0, token))
    return parts
