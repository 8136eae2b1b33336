from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from .schema import repo_root
from .validate import validate_report_page
from .violations import ValidationReport

LOGGER = logging.getLogger(__name__)

EXPECT_VALID = "valid"
EXPECT_INVALID = "invalid"


def default_cases_path() -> Path:
    return repo_root() / "examples" / "testcases.json"


@dataclass(frozen=True)
class ContractCase:
    """One regression case for the contract: a document and its expected verdict.

    ``expect_paths`` lists JSON Pointers that must appear among the error
    paths; other errors are allowed.
    """

    name: str
    expect: str
    document: Any
    expect_paths: tuple[str, ...] = ()
    strict: bool = False
    target_version: str | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "ContractCase":
        expect = obj.get("expect")
        if expect not in (EXPECT_VALID, EXPECT_INVALID):
            raise ValueError(f"Case {obj.get('name')!r}: expect must be 'valid' or 'invalid', got {expect!r}")
        return cls(
            name=str(obj["name"]),
            expect=expect,
            document=obj["document"],
            expect_paths=tuple(obj.get("expect_paths") or ()),
            strict=bool(obj.get("strict", False)),
            target_version=obj.get("target_version"),
        )


@dataclass(frozen=True)
class CaseMismatch:
    case: ContractCase
    report: ValidationReport
    reasons: tuple[str, ...] = field(default=())

    def describe(self) -> str:
        return f"{self.case.name}: " + "; ".join(self.reasons)


def load_contract_cases(path: str | Path | None = None) -> list[ContractCase]:
    p = Path(path) if path is not None else default_cases_path()
    data = json.loads(p.read_text(encoding="utf-8"))
    cases = data.get("cases") if isinstance(data, Mapping) else data
    if not isinstance(cases, list):
        raise ValueError(f"{p}: expected a list of cases or an object with 'cases'")
    out: list[ContractCase] = []
    for index, item in enumerate(cases):
        if not isinstance(item, Mapping):
            raise ValueError(f"{p}: case {index} must be an object, got {type(item).__name__}")
        missing = [key for key in ("name", "document") if key not in item]
        if missing:
            raise ValueError(f"{p}: case {index} is missing {', '.join(missing)}")
        out.append(ContractCase.from_dict(item))

    names = [c.name for c in out]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"{p}: duplicate case names: {duplicates}")
    return out


def check_case(case: ContractCase) -> CaseMismatch | None:
    report = validate_report_page(
        case.document,
        strict=case.strict,
        target_version=case.target_version,
    )
    reasons: list[str] = []

    if case.expect == EXPECT_VALID and not report.valid:
        reasons.append("expected valid, got errors at " + ", ".join(p or "/" for p in report.paths()))
    if case.expect == EXPECT_INVALID and report.valid:
        reasons.append("expected invalid, got valid")

    missing = [p for p in case.expect_paths if p not in report.paths()]
    if missing:
        reasons.append("expected errors at " + ", ".join(missing))

    if reasons:
        return CaseMismatch(case=case, report=report, reasons=tuple(reasons))
    return None


def run_contract_cases(cases: Iterable[ContractCase]) -> list[CaseMismatch]:
    """Run regression cases and return the ones whose verdict differs."""

    mismatches: list[CaseMismatch] = []
    count = 0
    for case in cases:
        count += 1
        mismatch = check_case(case)
        if mismatch is not None:
            mismatches.append(mismatch)
    LOGGER.info("Ran %d contract case(s), %d mismatch(es)", count, len(mismatches))
    return mismatches
