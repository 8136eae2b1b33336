from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from .config import ValidatorConfig
from .determinism import canonical_json_text
from .errors import ReportPageContractError
from .fixtures import CaseMismatch, load_contract_cases, run_contract_cases
from .validate import validate_report_page_file

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="report-page-validate",
        description="Validate report page documents against the report page JSON Schema contract.",
    )

    p.add_argument("instances", nargs="*", help="Report page JSON files to validate")

    g = p.add_mutually_exclusive_group()
    g.add_argument(
        "--schema",
        help="Schema file to validate against (defaults to REPORT_PAGE_SCHEMA_PATH or the latest contract).",
    )
    g.add_argument(
        "--schema-version",
        help="Contract version selector: v1, latest, or a full version such as 1.1.0.",
    )

    p.add_argument(
        "--strict",
        dest="strict",
        action="store_true",
        default=None,
        help="Reject unknown fields instead of warning about them.",
    )
    p.add_argument(
        "--permissive",
        dest="strict",
        action="store_false",
        help="Warn about unknown fields (default unless REPORT_PAGE_STRICT is set).",
    )

    p.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format for violations (default: text).",
    )

    p.add_argument(
        "--cases",
        metavar="PATH",
        help="Run a regression bundle of documents with expected verdicts (e.g. examples/testcases.json).",
    )

    p.add_argument(
        "--log-level",
        help="Logging level (default: REPORT_PAGE_LOG_LEVEL or WARNING).",
    )

    return p


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _case_results(mismatches: list[CaseMismatch], total: int) -> dict[str, Any]:
    return {
        "total": total,
        "passed": total - len(mismatches),
        "failures": [
            {"name": m.case.name, "reasons": list(m.reasons), "report": m.report.to_dict()} for m in mismatches
        ],
    }


def _run_cases(path: str, *, output_format: str) -> tuple[int, dict[str, Any] | None]:
    try:
        cases = load_contract_cases(path)
    except (OSError, ValueError) as exc:
        print(f"ERROR: cannot load cases from {path}: {exc}", file=sys.stderr)
        return EXIT_USAGE, None
    mismatches = run_contract_cases(cases)
    status = EXIT_INVALID if mismatches else EXIT_OK

    if output_format == "json":
        return status, _case_results(mismatches, len(cases))

    for mismatch in mismatches:
        print(f"FAIL: {mismatch.describe()}")
    if mismatches:
        print(f"{len(mismatches)} of {len(cases)} case(s) failed")
    else:
        print(f"OK: {len(cases)} case(s) passed")
    return status, None


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = ValidatorConfig.from_env().with_overrides(
        schema_path=args.schema,
        schema_version=args.schema_version,
        strict=args.strict,
        log_level=args.log_level,
    )
    _configure_logging(cfg.log_level)

    if not args.instances and not args.cases:
        parser.print_usage(sys.stderr)
        print("ERROR: no instance files given", file=sys.stderr)
        return EXIT_USAGE

    payload: dict[str, Any] = {}
    status = EXIT_OK
    try:
        if args.cases:
            status, case_results = _run_cases(args.cases, output_format=args.format)
            if status == EXIT_USAGE:
                return status
            if case_results is not None:
                payload["cases"] = case_results

        results: list[dict[str, Any]] = []
        for instance in args.instances:
            path = Path(instance)
            try:
                report = validate_report_page_file(path, config=cfg)
            except OSError as exc:
                print(f"ERROR: cannot read instance {path}: {exc}", file=sys.stderr)
                return EXIT_USAGE

            if not report.valid and status == EXIT_OK:
                status = EXIT_INVALID

            if args.format == "json":
                results.append({"instance": str(path), **report.to_dict()})
                continue

            for line in report.format_text(prefix=f"{path}: "):
                print(line)
            if report.valid:
                print(f"OK: {path}")
            else:
                print(f"INVALID: {path} ({len(report.errors)} error(s))")
        if args.instances:
            payload["results"] = results
    except ReportPageContractError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if args.format == "json":
        print(canonical_json_text(payload))

    LOGGER.debug("Exit status %d", status)
    return status


if __name__ == "__main__":
    raise SystemExit(main())
