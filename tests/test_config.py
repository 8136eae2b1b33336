from __future__ import annotations

from pathlib import Path

from report_page_contract import validate_report_page
from report_page_contract.config import ValidatorConfig


def test_defaults_without_environment() -> None:
    cfg = ValidatorConfig.from_env({})
    assert cfg == ValidatorConfig()
    assert cfg.strict is False
    assert cfg.log_level == "WARNING"


def test_environment_variables() -> None:
    cfg = ValidatorConfig.from_env(
        {
            "REPORT_PAGE_SCHEMA_VERSION": "v1",
            "REPORT_PAGE_STRICT": "yes",
            "REPORT_PAGE_LOG_LEVEL": "debug",
        }
    )
    assert cfg.schema_version == "v1"
    assert cfg.schema_path is None
    assert cfg.strict is True
    assert cfg.log_level == "DEBUG"


def test_falsy_and_blank_values() -> None:
    cfg = ValidatorConfig.from_env({"REPORT_PAGE_STRICT": "0", "REPORT_PAGE_SCHEMA_PATH": "  "})
    assert cfg.strict is False
    assert cfg.schema_path is None


def test_explicit_overrides_win() -> None:
    env_cfg = ValidatorConfig.from_env({"REPORT_PAGE_SCHEMA_PATH": "/tmp/x.json", "REPORT_PAGE_STRICT": "1"})
    assert env_cfg.schema_path == Path("/tmp/x.json")

    cfg = env_cfg.with_overrides(schema_version="latest", strict=False)
    assert cfg.schema_path is None
    assert cfg.schema_version == "latest"
    assert cfg.strict is False

    back = cfg.with_overrides(schema_path="other.json")
    assert back.schema_path == Path("other.json")
    assert back.schema_version is None


def test_none_overrides_keep_values() -> None:
    cfg = ValidatorConfig(schema_version="v1", strict=True)
    assert cfg.with_overrides() == cfg


def test_config_strictness_reaches_the_validator(my_report: dict) -> None:
    my_report["owner"] = "someone"

    assert validate_report_page(my_report).valid
    assert not validate_report_page(my_report, config=ValidatorConfig(strict=True)).valid
    assert validate_report_page(my_report, config=ValidatorConfig(strict=True), strict=False).valid
