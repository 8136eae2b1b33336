from __future__ import annotations

import json
from pathlib import Path

import pytest
from jsonschema import Draft202012Validator

from report_page_contract import (
    CURRENT_VERSION,
    InvalidSchemaError,
    SchemaNotFoundError,
    UnsupportedVersionError,
    ViolationCode,
    load_schema,
    resolve_schema_path,
    validate_report_page,
    validate_report_page_file,
)
from report_page_contract.schema import schema_contract_version, target_version_for


def test_schema_paths_are_version_pinned() -> None:
    v1 = resolve_schema_path("v1")
    latest = resolve_schema_path()

    assert v1.parts[-3:] == ("schemas", "v1", "report-page.schema.json")
    assert latest.parts[-3:] == ("schemas", "latest", "report-page.schema.json")
    assert resolve_schema_path("1.1.0") == v1
    assert resolve_schema_path("latest") == latest


def test_schema_artifacts_are_valid_draft_2020_12() -> None:
    for selector in ("v1", "latest"):
        schema = load_schema(resolve_schema_path(selector))
        Draft202012Validator.check_schema(schema)
        assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"
        assert schema_contract_version(schema) == CURRENT_VERSION


def test_latest_alias_matches_v1_except_id() -> None:
    v1 = load_schema(resolve_schema_path("v1"))
    latest = load_schema(resolve_schema_path("latest"))

    assert v1.pop("$id").endswith("/schema/v1/report-page.schema.json")
    assert latest.pop("$id").endswith("/schema/latest/report-page.schema.json")
    assert v1 == latest


@pytest.mark.parametrize("selector", [None, "latest", "v1", "1", "1.1.0"])
def test_target_version_selectors(selector: str | None) -> None:
    assert target_version_for(selector) == CURRENT_VERSION


@pytest.mark.parametrize("selector", ["2", "v2", "1.0.0", "2.0.0", "newest"])
def test_unsupported_target_versions(selector: str) -> None:
    with pytest.raises(UnsupportedVersionError):
        target_version_for(selector)
    with pytest.raises(UnsupportedVersionError):
        validate_report_page({}, target_version=selector)


def test_missing_schema_file_raises(tmp_path: Path, my_report: dict) -> None:
    with pytest.raises(SchemaNotFoundError):
        validate_report_page(my_report, schema_path=tmp_path / "nope.schema.json")


def test_broken_schema_file_raises(tmp_path: Path, my_report: dict) -> None:
    not_json = tmp_path / "not-json.schema.json"
    not_json.write_text("{", encoding="utf-8")
    with pytest.raises(InvalidSchemaError):
        validate_report_page(my_report, schema_path=not_json)

    bad_keyword = tmp_path / "bad.schema.json"
    bad_keyword.write_text(json.dumps({"type": 5}), encoding="utf-8")
    with pytest.raises(InvalidSchemaError):
        validate_report_page(my_report, schema_path=bad_keyword)


def test_explicit_schema_path_reads_its_contract_version(tmp_path: Path, my_report: dict) -> None:
    schema = load_schema(resolve_schema_path("v1"))
    schema["x-contract-version"] = "1.0.0"
    older = tmp_path / "report-page.schema.json"
    older.write_text(json.dumps(schema), encoding="utf-8")

    report = validate_report_page(my_report, schema_path=older)

    assert report.target_version == "1.0.0"
    assert report.valid
    assert [v.code for v in report.warnings] == [ViolationCode.NEWER_MINOR_VERSION]


def test_file_that_is_not_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{"title": ', encoding="utf-8")

    report = validate_report_page_file(path)

    assert not report.valid
    assert [(v.path, v.code) for v in report.errors] == [("", ViolationCode.WRONG_TYPE)]
    assert report.errors[0].message.startswith("document is not valid JSON")


def test_file_validation_matches_in_memory(examples_dir: Path, my_report: dict) -> None:
    from_file = validate_report_page_file(examples_dir / "my-report.json")
    assert from_file == validate_report_page(my_report)


def test_file_that_is_not_utf8(tmp_path: Path) -> None:
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"title": "Caf\xe9"}')

    report = validate_report_page_file(path)

    assert not report.valid
    assert [(v.path, v.code) for v in report.errors] == [("", ViolationCode.WRONG_TYPE)]
    assert report.errors[0].message == "document is not valid JSON: not UTF-8 encoded (byte 14)"
