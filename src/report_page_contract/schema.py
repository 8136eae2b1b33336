from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from .errors import InvalidSchemaError, SchemaNotFoundError, UnsupportedVersionError
from .versioning import CURRENT_VERSION, SemVer

LOGGER = logging.getLogger(__name__)

SCHEMA_FILENAME = "report-page.schema.json"
LATEST = "latest"

# Contract versions served by this package, keyed by major.
SUPPORTED_VERSIONS: dict[int, str] = {1: CURRENT_VERSION}


def _find_repo_root(start: Path) -> Path:
    current = start
    for _ in range(10):
        if (current / "pyproject.toml").exists() and (current / "schemas").exists():
            return current
        if current.parent == current:
            break
        current = current.parent
    raise SchemaNotFoundError(
        "Could not locate repo root (pyproject.toml + schemas/) from: " + str(start)
    )


def repo_root() -> Path:
    return _find_repo_root(Path(__file__).resolve())


def schemas_root() -> Path:
    return repo_root() / "schemas"


def target_version_for(selector: str | None) -> str:
    """Map a version selector to the full contract version it pins.

    Accepted selectors: ``None`` or ``"latest"``, a major path such as
    ``"v1"``, a bare major ``"1"``, or a full version served by this package.
    """

    if selector is None or selector == LATEST:
        return SUPPORTED_VERSIONS[max(SUPPORTED_VERSIONS)]

    raw = selector.strip()
    if raw.lower().startswith("v"):
        raw = raw[1:]
    if raw.isdigit():
        major = int(raw)
        if major in SUPPORTED_VERSIONS:
            return SUPPORTED_VERSIONS[major]
        raise UnsupportedVersionError(f"No contract is published for major version {major}")

    try:
        version = SemVer.parse(raw)
    except ValueError:
        raise UnsupportedVersionError(f"Unrecognised schema version selector: {selector!r}") from None
    if SUPPORTED_VERSIONS.get(version.major) != str(version):
        supported = ", ".join(sorted(SUPPORTED_VERSIONS.values()))
        raise UnsupportedVersionError(
            f"Contract version {version} is not served by this validator (supported: {supported})"
        )
    return str(version)


def resolve_schema_path(selector: str | None = None) -> Path:
    """Resolve a version selector to the schema file on disk.

    ``latest`` maps to the unpinned alias; every other selector maps to the
    version-pinned major path, e.g. ``schemas/v1/report-page.schema.json``.
    """

    root = schemas_root()
    if selector is None or selector == LATEST:
        return root / LATEST / SCHEMA_FILENAME
    version = SemVer.parse(target_version_for(selector))
    return root / version.path_segment / SCHEMA_FILENAME


def load_schema(schema_path: str | Path | None = None) -> dict[str, Any]:
    path = Path(schema_path) if schema_path is not None else resolve_schema_path()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaNotFoundError(f"Cannot read schema {path}: {exc}") from exc
    try:
        schema = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidSchemaError(f"Schema {path} is not valid JSON: {exc}") from exc
    if not isinstance(schema, dict):
        raise InvalidSchemaError(f"Schema {path} must be a JSON object")
    return schema


def schema_contract_version(schema: dict[str, Any]) -> str | None:
    value = schema.get("x-contract-version")
    return value if isinstance(value, str) else None


@lru_cache(maxsize=16)
def _compiled(path_key: str) -> Draft202012Validator:
    schema = load_schema(path_key)
    try:
        Draft202012Validator.check_schema(schema)
    except SchemaError as exc:
        raise InvalidSchemaError(f"Schema {path_key} is not a valid draft 2020-12 schema: {exc.message}") from exc
    LOGGER.debug("Loaded schema %s (contract %s)", path_key, schema_contract_version(schema))
    return Draft202012Validator(schema, format_checker=jsonschema.FormatChecker())


def get_validator(schema_path: str | Path | None = None) -> Draft202012Validator:
    """Return a compiled validator for a schema file (cached per path)."""

    path = Path(schema_path) if schema_path is not None else resolve_schema_path()
    return _compiled(str(path.resolve()))
