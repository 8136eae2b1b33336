from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping


SCHEMA_PATH_ENV = "REPORT_PAGE_SCHEMA_PATH"
SCHEMA_VERSION_ENV = "REPORT_PAGE_SCHEMA_VERSION"
STRICT_ENV = "REPORT_PAGE_STRICT"
LOG_LEVEL_ENV = "REPORT_PAGE_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"


def _env_str(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name, "").strip()
    return value or None


def _env_flag(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = environ.get(name, "").strip().lower()
    if not value:
        return default
    return value in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class ValidatorConfig:
    """Validator settings.

    Explicit arguments win over environment variables, which win over the
    defaults:
    - ``REPORT_PAGE_SCHEMA_PATH``: schema file to validate against
    - ``REPORT_PAGE_SCHEMA_VERSION``: version selector (``v1``, ``latest``, ``1.1.0``)
    - ``REPORT_PAGE_STRICT``: reject unknown fields instead of warning
    - ``REPORT_PAGE_LOG_LEVEL``: CLI log level
    """

    schema_path: Path | None = None
    schema_version: str | None = None
    strict: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ValidatorConfig":
        env = os.environ if environ is None else environ
        schema_path = _env_str(env, SCHEMA_PATH_ENV)
        return cls(
            schema_path=Path(schema_path) if schema_path else None,
            schema_version=_env_str(env, SCHEMA_VERSION_ENV),
            strict=_env_flag(env, STRICT_ENV),
            log_level=(_env_str(env, LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper(),
        )

    def with_overrides(
        self,
        *,
        schema_path: str | os.PathLike[str] | None = None,
        schema_version: str | None = None,
        strict: bool | None = None,
        log_level: str | None = None,
    ) -> "ValidatorConfig":
        cfg = self
        if schema_path is not None:
            # An explicit path replaces any selector coming from the environment.
            cfg = replace(cfg, schema_path=Path(schema_path), schema_version=None)
        if schema_version is not None:
            cfg = replace(cfg, schema_version=schema_version, schema_path=None)
        if strict is not None:
            cfg = replace(cfg, strict=strict)
        if log_level is not None:
            cfg = replace(cfg, log_level=log_level.upper())
        return cfg
