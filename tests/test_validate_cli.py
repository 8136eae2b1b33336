from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[1]
_EXAMPLES = _REPO_ROOT / "examples"


def _clean_env(**extra: str) -> dict[str, str]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("REPORT_PAGE_")}
    env.update(extra)
    return env


def _run_cli(args: list[str], *, env: dict[str, str]) -> subprocess.CompletedProcess[str]:
    env = dict(env)
    src_path = str(_REPO_ROOT / "src")
    env["PYTHONPATH"] = src_path + (":" + env["PYTHONPATH"] if env.get("PYTHONPATH") else "")
    return subprocess.run(
        [sys.executable, "-m", "report_page_contract.cli", *args],
        check=False,
        text=True,
        capture_output=True,
        env=env,
    )


def _write(path: Path, doc: object) -> Path:
    path.write_text(json.dumps(doc, indent=2), encoding="utf-8")
    return path


def _load_example(name: str) -> dict:
    return json.loads((_EXAMPLES / name).read_text(encoding="utf-8"))


def test_cli_help() -> None:
    proc = _run_cli(["--help"], env=_clean_env())
    assert proc.returncode == 0
    assert "Validate report page documents" in proc.stdout


def test_cli_without_inputs_is_a_usage_error() -> None:
    proc = _run_cli([], env=_clean_env())
    assert proc.returncode == 2
    assert "no instance files given" in proc.stderr


def test_cli_valid_documents() -> None:
    files = [str(_EXAMPLES / "my-report.json"), str(_EXAMPLES / "fleet-overview.json")]
    proc = _run_cli(files, env=_clean_env())
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert f"OK: {files[0]}" in proc.stdout
    assert f"OK: {files[1]}" in proc.stdout


def test_cli_invalid_document_lists_every_violation(tmp_path: Path) -> None:
    doc = _load_example("my-report.json")
    doc["rows"][0]["visuals"][0]["color"] = "#ZZZ"
    del doc["title"]
    path = _write(tmp_path / "invalid.json", doc)

    proc = _run_cli([str(path)], env=_clean_env())

    assert proc.returncode == 1
    assert f"{path}: /rows/0/visuals/0/color: rows[0].visuals[0].color must be a hex color" in proc.stdout
    assert f"{path}: /title: title is required [missing_required]" in proc.stdout
    assert f"INVALID: {path} (2 error(s))" in proc.stdout


def test_cli_mixed_inputs_exit_invalid(tmp_path: Path) -> None:
    bad = _write(tmp_path / "bad.json", {})
    proc = _run_cli([str(bad), str(_EXAMPLES / "my-report.json")], env=_clean_env())
    assert proc.returncode == 1
    assert "OK: " in proc.stdout
    assert "INVALID: " in proc.stdout


def test_cli_json_output(tmp_path: Path) -> None:
    doc = _load_example("my-report.json")
    doc["meta"]["schema_version"] = "1.2.0"
    path = _write(tmp_path / "newer.json", doc)

    proc = _run_cli(["--format", "json", str(path)], env=_clean_env())

    assert proc.returncode == 0
    payload = json.loads(proc.stdout)
    [result] = payload["results"]
    assert result["instance"] == str(path)
    assert result["valid"] is True
    assert result["document_version"] == "1.2.0"
    assert [w["code"] for w in result["warnings"]] == ["newer_minor_version"]


def test_cli_missing_file_is_a_usage_error(tmp_path: Path) -> None:
    proc = _run_cli([str(tmp_path / "missing.json")], env=_clean_env())
    assert proc.returncode == 2
    assert "cannot read instance" in proc.stderr


def test_cli_strict_mode(tmp_path: Path) -> None:
    doc = _load_example("my-report.json")
    doc["owner"] = "someone"
    path = _write(tmp_path / "extra.json", doc)

    permissive = _run_cli([str(path)], env=_clean_env())
    assert permissive.returncode == 0
    assert "warning: /owner" in permissive.stdout

    strict = _run_cli(["--strict", str(path)], env=_clean_env())
    assert strict.returncode == 1

    from_env = _run_cli([str(path)], env=_clean_env(REPORT_PAGE_STRICT="1"))
    assert from_env.returncode == 1

    overridden = _run_cli(["--permissive", str(path)], env=_clean_env(REPORT_PAGE_STRICT="1"))
    assert overridden.returncode == 0


def test_cli_schema_version_selectors() -> None:
    path = str(_EXAMPLES / "my-report.json")

    assert _run_cli(["--schema-version", "v1", path], env=_clean_env()).returncode == 0

    proc = _run_cli(["--schema-version", "2", path], env=_clean_env())
    assert proc.returncode == 2
    assert "major version 2" in proc.stderr

    from_env = _run_cli([path], env=_clean_env(REPORT_PAGE_SCHEMA_VERSION="v2"))
    assert from_env.returncode == 2


def test_cli_explicit_schema_file(tmp_path: Path) -> None:
    path = str(_EXAMPLES / "my-report.json")
    schema = _REPO_ROOT / "schemas" / "v1" / "report-page.schema.json"

    assert _run_cli(["--schema", str(schema), path], env=_clean_env()).returncode == 0

    proc = _run_cli(["--schema", str(tmp_path / "none.json"), path], env=_clean_env())
    assert proc.returncode == 2
    assert proc.stderr.startswith("ERROR: ")


def test_cli_contract_cases() -> None:
    proc = _run_cli(["--cases", str(_EXAMPLES / "testcases.json")], env=_clean_env())
    assert proc.returncode == 0, proc.stdout
    assert "OK: 11 case(s) passed" in proc.stdout


def test_cli_contract_cases_report_failures(tmp_path: Path) -> None:
    cases = _write(tmp_path / "cases.json", {"cases": [{"name": "empty", "expect": "valid", "document": {}}]})
    proc = _run_cli(["--cases", str(cases)], env=_clean_env())
    assert proc.returncode == 1
    assert "FAIL: empty: expected valid" in proc.stdout


def test_cli_non_utf8_instance_is_reported_not_raised(tmp_path: Path) -> None:
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"title": "Caf\xe9"}')

    proc = _run_cli([str(path)], env=_clean_env())

    assert proc.returncode == 1
    assert "Traceback" not in proc.stderr
    assert f"{path}: /: document is not valid JSON: not UTF-8 encoded" in proc.stdout
    assert f"INVALID: {path} (1 error(s))" in proc.stdout


def test_cli_malformed_case_bundle_is_a_usage_error(tmp_path: Path) -> None:
    cases = _write(tmp_path / "cases.json", [{"name": "x", "expect": "valid"}])
    proc = _run_cli(["--cases", str(cases)], env=_clean_env())
    assert proc.returncode == 2
    assert "Traceback" not in proc.stderr
    assert proc.stderr.startswith(f"ERROR: cannot load cases from {cases}")


def test_cli_contract_cases_as_json(tmp_path: Path) -> None:
    cases = _write(
        tmp_path / "cases.json",
        {
            "cases": [
                {"name": "empty", "expect": "valid", "document": {}},
                {"name": "also empty", "expect": "invalid", "document": {}},
            ]
        },
    )
    proc = _run_cli(
        ["--format", "json", "--cases", str(cases), str(_EXAMPLES / "my-report.json")], env=_clean_env()
    )

    assert proc.returncode == 1
    payload = json.loads(proc.stdout)
    assert payload["cases"]["total"] == 2
    assert payload["cases"]["passed"] == 1
    [failure] = payload["cases"]["failures"]
    assert failure["name"] == "empty"
    assert failure["reasons"][0].startswith("expected valid")
    [result] = payload["results"]
    assert result["valid"] is True
