from __future__ import annotations

import pytest

from report_page_contract import Severity, ViolationCode, validate_report_page
from report_page_contract.versioning import Compatibility, DeprecatedField, SemVer, classify


@pytest.mark.parametrize(
    ("document_version", "expected"),
    [
        ("1.1.0", Compatibility.EXACT),
        ("1.0.0", Compatibility.OLDER_MINOR),
        ("1.0.7", Compatibility.OLDER_MINOR),
        ("1.1.3", Compatibility.NEWER_PATCH),
        ("1.2.0", Compatibility.NEWER_MINOR),
        ("2.0.0", Compatibility.MAJOR_MISMATCH),
        ("0.9.0", Compatibility.MAJOR_MISMATCH),
        ("1.1", Compatibility.MALFORMED),
        ("latest", Compatibility.MALFORMED),
    ],
)
def test_classify_against_current_contract(document_version: str, expected: Compatibility) -> None:
    assert classify(document_version, "1.1.0") is expected


def test_only_major_mismatch_and_malformed_are_rejected() -> None:
    rejected = {c for c in Compatibility if not c.accepted}
    assert rejected == {Compatibility.MAJOR_MISMATCH, Compatibility.MALFORMED}


def test_semver_parse_and_order() -> None:
    v = SemVer.parse("1.10.2-rc.1+build.5")
    assert (v.major, v.minor, v.patch, v.prerelease) == (1, 10, 2, "rc.1")
    assert str(v) == "1.10.2-rc.1"
    assert v.path_segment == "v1"
    assert SemVer.parse("1.2.0") < SemVer.parse("1.10.0")

    with pytest.raises(ValueError):
        SemVer.parse("01.0.0")


def test_deprecation_window_spans_two_minors() -> None:
    legacy = DeprecatedField("/rows/*/visuals/*/options/legacy_total", deprecated_in="1.1.0", replacement="target")

    assert legacy.segments == ("rows", "*", "visuals", "*", "options", "legacy_total")
    assert str(legacy.guaranteed_through) == "1.3.0"

    assert legacy.active_in("1.1.0")
    assert legacy.active_in("1.4.0")
    assert not legacy.active_in("1.0.0")
    assert not legacy.active_in("2.0.0")


def _report_with_tile_options(options: dict) -> dict:
    return {
        "title": "Deprecations",
        "meta": {
            "schema_version": "1.1.0",
            "last_updated": "2025-01-15T10:00:00Z",
            "updated_by": {"id": "u-1", "name": "Report Author"},
        },
        "rows": [
            {
                "type": "tiles",
                "visuals": [
                    {"kind": "tile", "label": "A", "query": {"sql": "SELECT 1"}, "options": options},
                ],
            }
        ],
    }


def test_deprecated_field_is_reported_as_warning() -> None:
    doc = _report_with_tile_options({"suffix": " km"})
    deprecated = [DeprecatedField("/rows/*/visuals/*/options/suffix", deprecated_in="1.1.0", replacement="unit")]

    report = validate_report_page(doc, deprecated_fields=deprecated)

    assert report.valid
    assert [(v.path, v.code, v.severity) for v in report.warnings] == [
        ("/rows/0/visuals/0/options/suffix", ViolationCode.DEPRECATED_FIELD, Severity.WARNING)
    ]
    message = report.warnings[0].message
    assert "deprecated since 1.1.0" in message
    assert "use unit" in message
    assert "accepted through at least 1.3.0" in message
    assert "removed no earlier than the 2.0.0 contract" in message


def test_deprecation_announced_in_a_later_minor_is_silent() -> None:
    doc = _report_with_tile_options({"suffix": " km"})
    deprecated = [DeprecatedField("/rows/*/visuals/*/options/suffix", deprecated_in="1.2.0")]

    report = validate_report_page(doc, deprecated_fields=deprecated)

    assert report.warnings == ()


def test_v1_contract_has_no_deprecations(fleet_report: dict) -> None:
    report = validate_report_page(fleet_report)
    assert ViolationCode.DEPRECATED_FIELD not in {v.code for v in report.violations}
