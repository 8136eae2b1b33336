from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Sequence

from jsonschema.exceptions import ValidationError

from .config import ValidatorConfig
from .errors import ReportPageValidationError
from .schema import (
    get_validator,
    load_schema,
    resolve_schema_path,
    schema_contract_version,
    target_version_for,
)
from .versioning import DEPRECATED_FIELDS, Compatibility, DeprecatedField, SemVer, classify
from .violations import (
    Severity,
    ValidationReport,
    Violation,
    ViolationCode,
    to_location,
    to_pointer,
)

LOGGER = logging.getLogger(__name__)

HEX_COLOR_PATTERN = "^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"

# (min, max) visuals per row type.
ROW_ARITY: dict[str, tuple[int, int]] = {
    "tiles": (1, 3),
    "table": (1, 1),
    "annotation": (1, 1),
    "charts": (1, 3),
}

ROW_VISUAL_KINDS: dict[str, tuple[str, ...]] = {
    "tiles": ("tile",),
    "table": ("table",),
    "annotation": ("annotation",),
    "charts": ("bar", "pie"),
}

_VERSION_PATH = ("meta", "schema_version")

_SQL_NOISE_RE = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|--[^\n]*|/\*.*?\*/", re.S)
_PLACEHOLDER_RE = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


def validate_report_page(
    document: Any,
    *,
    target_version: str | None = None,
    strict: bool | None = None,
    schema_path: str | Path | None = None,
    config: ValidatorConfig | None = None,
    deprecated_fields: Iterable[DeprecatedField] | None = None,
) -> ValidationReport:
    """Validate a parsed JSON value against the report page contract.

    All violations are collected in one pass. Validation failures are returned
    in the report, never raised; only a missing or broken schema raises.

    ``target_version`` is a selector (``"v1"``, ``"latest"``, ``"1.1.0"``).
    When ``schema_path`` is given it wins, and the contract version is read
    from the schema's ``x-contract-version``.
    """

    cfg = (config or ValidatorConfig()).with_overrides(
        schema_path=schema_path, schema_version=target_version, strict=strict
    )

    if cfg.schema_path is not None:
        path = cfg.schema_path
        target = schema_contract_version(load_schema(path)) or target_version_for(None)
    else:
        path = resolve_schema_path(cfg.schema_version)
        target = target_version_for(cfg.schema_version)

    validator = get_validator(path)

    violations: list[Violation] = []
    for error in validator.iter_errors(document):
        violations.extend(_violations_from_error(error, document, strict=cfg.strict))

    violations.extend(_check_schema_version(document, target))
    violations.extend(_check_consistency(document))
    fields = DEPRECATED_FIELDS if deprecated_fields is None else tuple(deprecated_fields)
    violations.extend(_check_deprecated(document, fields, target))

    report = ValidationReport.build(
        violations,
        target_version=target,
        document_version=_document_version(document),
    )
    LOGGER.debug(
        "Validated report page against %s: valid=%s errors=%d warnings=%d",
        target,
        report.valid,
        len(report.errors),
        len(report.warnings),
    )
    return report


def validate_report_page_file(json_path: str | Path, **kwargs: Any) -> ValidationReport:
    """Load a JSON file and validate it.

    A file that is not UTF-8 encoded JSON is reported as a single violation at
    the document root. Unreadable files raise OSError.
    """

    data = Path(json_path).read_bytes()
    try:
        document = json.loads(data.decode("utf-8"))
    except UnicodeDecodeError as exc:
        return _not_json_report(f"document is not valid JSON: not UTF-8 encoded (byte {exc.start})", kwargs)
    except json.JSONDecodeError as exc:
        return _not_json_report(
            f"document is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})", kwargs
        )
    return validate_report_page(document, **kwargs)


def _not_json_report(message: str, kwargs: Mapping[str, Any]) -> ValidationReport:
    config = kwargs.get("config")
    selector = kwargs.get("target_version") or (config.schema_version if config is not None else None)
    violation = Violation(path="", code=ViolationCode.WRONG_TYPE, message=message)
    return ValidationReport.build([violation], target_version=target_version_for(selector))


def assert_valid_report_page(document: Any, **kwargs: Any) -> ValidationReport:
    """Validate and raise ReportPageValidationError if the document is invalid."""

    report = validate_report_page(document, **kwargs)
    if not report.valid:
        raise ReportPageValidationError(report)
    return report


def _document_version(document: Any) -> str | None:
    meta = document.get("meta") if isinstance(document, Mapping) else None
    version = meta.get("schema_version") if isinstance(meta, Mapping) else None
    return version if isinstance(version, str) else None


def _lookup(document: Any, path: Iterable[str | int]) -> Any:
    current = document
    for part in path:
        if isinstance(part, int) and isinstance(current, list) and 0 <= part < len(current):
            current = current[part]
        elif isinstance(part, str) and isinstance(current, Mapping):
            current = current.get(part)
        else:
            return None
    return current


def _is_visuals_path(path: Sequence[Any]) -> bool:
    return len(path) == 3 and path[0] == "rows" and isinstance(path[1], int) and path[2] == "visuals"


def _is_visual_kind_path(path: Sequence[Any]) -> bool:
    return len(path) == 5 and _is_visuals_path(path[:3]) and isinstance(path[3], int) and path[4] == "kind"


def _is_option_bundle_path(path: Sequence[Any]) -> bool:
    return len(path) == 5 and _is_visuals_path(path[:3]) and isinstance(path[3], int) and path[4] == "options"


def _describe_type(expected: Any) -> str:
    if isinstance(expected, list):
        return " or ".join(str(t) for t in expected)
    return str(expected)


def _violations_from_error(error: ValidationError, document: Any, *, strict: bool) -> list[Violation]:
    path = list(error.absolute_path)
    loc = to_location(path)
    pointer = to_pointer(path)
    keyword = error.validator
    value = error.validator_value

    if tuple(path) == _VERSION_PATH and keyword == "pattern":
        # Reported by the version policy check.
        return []

    if keyword == "required":
        instance = error.instance if isinstance(error.instance, Mapping) else {}
        return [
            Violation(
                to_pointer(path + [name]),
                ViolationCode.MISSING_REQUIRED,
                f"{to_location(path + [name])} is required",
            )
            for name in value
            if name not in instance
        ]

    if keyword == "type":
        return [Violation(pointer, ViolationCode.WRONG_TYPE, f"{loc} must be of type {_describe_type(value)}")]

    if keyword == "pattern":
        if value == HEX_COLOR_PATTERN:
            message = f"{loc} must be a hex color like #abc or #aabbcc, got {error.instance!r}"
        else:
            message = f"{loc} must match pattern {value}"
        return [Violation(pointer, ViolationCode.PATTERN_MISMATCH, message)]

    if keyword in ("const", "enum"):
        if _is_visual_kind_path(path):
            row_type = _lookup(document, path[:2] + ["type"])
            return [
                Violation(
                    pointer,
                    ViolationCode.KIND_MISMATCH,
                    f"{loc} {error.instance!r} is not allowed in a {row_type} row"
                    f" (allowed: {', '.join(ROW_VISUAL_KINDS.get(str(row_type), ()))})",
                )
            ]
        if keyword == "const":
            message = f"{loc} must be {value!r}"
        else:
            message = f"{loc} must be one of: " + ", ".join(str(v) for v in value)
        return [Violation(pointer, ViolationCode.ENUM_MISMATCH, message)]

    if keyword in ("minItems", "maxItems"):
        if _is_visuals_path(path):
            row_type = _lookup(document, path[:2] + ["type"])
            low, high = ROW_ARITY.get(str(row_type), (value, value))
            if low == high:
                message = f"{loc} must have length == {low} for type={row_type}"
            elif keyword == "maxItems":
                message = f"{loc} must have length <= {high} for type={row_type}"
            else:
                message = f"{loc} must have length >= {low} for type={row_type}"
        else:
            op = "<=" if keyword == "maxItems" else ">="
            message = f"{loc} must have length {op} {value}"
        return [Violation(pointer, ViolationCode.ARITY, message)]

    if keyword in ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum"):
        op = {"minimum": ">=", "maximum": "<=", "exclusiveMinimum": ">", "exclusiveMaximum": "<"}[keyword]
        return [Violation(pointer, ViolationCode.OUT_OF_RANGE, f"{loc} must be {op} {value}")]

    if keyword == "minLength":
        if value == 1:
            message = f"{loc} must be a non-empty string"
        else:
            message = f"{loc} must have at least {value} characters"
        return [Violation(pointer, ViolationCode.OUT_OF_RANGE, message)]

    if keyword == "format":
        return [Violation(pointer, ViolationCode.FORMAT, f"{loc} must be a valid {value}, got {error.instance!r}")]

    if keyword == "additionalProperties" and value is False:
        return _unknown_field_violations(error, path, document, strict=strict)

    return [Violation(pointer, ViolationCode.CONSISTENCY, f"{loc}: {error.message}")]


def _unknown_field_violations(
    error: ValidationError, path: list[str | int], document: Any, *, strict: bool
) -> list[Violation]:
    instance = error.instance if isinstance(error.instance, Mapping) else {}
    known = set(error.schema.get("properties", {})) if isinstance(error.schema, Mapping) else set()
    extras = sorted(str(k) for k in instance if k not in known)

    out: list[Violation] = []
    for name in extras:
        field_path = path + [name]
        loc = to_location(field_path)
        if _is_option_bundle_path(path):
            # Option bundles are closed in every mode: options of one visual
            # kind are never valid on another.
            kind = _lookup(document, path[:4] + ["kind"])
            out.append(
                Violation(
                    to_pointer(field_path),
                    ViolationCode.UNKNOWN_FIELD,
                    f"{loc} is not a valid option for kind={kind}",
                )
            )
            continue
        out.append(
            Violation(
                to_pointer(field_path),
                ViolationCode.UNKNOWN_FIELD,
                f"{loc} is not a recognised field",
                Severity.ERROR if strict else Severity.WARNING,
            )
        )
    return out


def _check_schema_version(document: Any, target: str) -> list[Violation]:
    version = _document_version(document)
    if version is None:
        return []

    pointer = to_pointer(_VERSION_PATH)
    compat = classify(version, target)
    if not compat.accepted:
        if compat is Compatibility.MALFORMED:
            return [
                Violation(
                    pointer,
                    ViolationCode.PATTERN_MISMATCH,
                    f"meta.schema_version must be a semantic version like {target}, got {version!r}",
                )
            ]
        pinned = SemVer.parse(target)
        return [
            Violation(
                pointer,
                ViolationCode.UNSUPPORTED_VERSION,
                f"meta.schema_version {version} is not supported: "
                f"this validator reads major version {pinned.major} (contract {target})",
            )
        ]
    if compat is Compatibility.NEWER_MINOR:
        return [
            Violation(
                pointer,
                ViolationCode.NEWER_MINOR_VERSION,
                f"meta.schema_version {version} is newer than {target}; "
                "read forward-compatibly, newer fields are treated as unknown",
                Severity.WARNING,
            )
        ]
    return []


def _iter_visuals(document: Mapping[str, Any]) -> Iterator[tuple[list[str | int], Mapping[str, Any]]]:
    rows = document.get("rows")
    if not isinstance(rows, list):
        return
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            continue
        visuals = row.get("visuals")
        if not isinstance(visuals, list):
            continue
        for j, visual in enumerate(visuals):
            if isinstance(visual, Mapping):
                yield ["rows", i, "visuals", j], visual


def _iter_queries(document: Mapping[str, Any]) -> Iterator[tuple[list[str | int], Mapping[str, Any]]]:
    for path, visual in _iter_visuals(document):
        query = visual.get("query")
        if isinstance(query, Mapping):
            yield path + ["query"], query
        options = visual.get("options")
        if isinstance(options, Mapping) and isinstance(options.get("delta_query"), Mapping):
            yield path + ["options", "delta_query"], options["delta_query"]


def sql_placeholders(sql: str) -> list[str]:
    """Named ``:name`` placeholders in SQL text, in order of first use.

    Matching is lexical: string literals, quoted identifiers and comments are
    skipped, and ``::type`` casts are not placeholders.
    """

    stripped = _SQL_NOISE_RE.sub(" ", sql)
    seen: dict[str, None] = {}
    for m in _PLACEHOLDER_RE.finditer(stripped):
        seen.setdefault(m.group(1), None)
    return list(seen)


def _check_consistency(document: Any) -> list[Violation]:
    if not isinstance(document, Mapping):
        return []

    out: list[Violation] = []

    datasource_ids: set[str] | None = None
    datasources = document.get("datasources")
    if isinstance(datasources, list):
        datasource_ids = set()
        first_seen: dict[str, int] = {}
        for i, item in enumerate(datasources):
            if not isinstance(item, Mapping) or not isinstance(item.get("id"), str):
                continue
            ds_id = item["id"]
            if ds_id in first_seen:
                out.append(
                    Violation(
                        to_pointer(["datasources", i, "id"]),
                        ViolationCode.CONSISTENCY,
                        f"datasources[{i}].id {ds_id!r} duplicates datasources[{first_seen[ds_id]}].id",
                    )
                )
            first_seen.setdefault(ds_id, i)
            datasource_ids.add(ds_id)

    parameter_names = _check_parameters(document, out)

    for path, query in _iter_queries(document):
        ds_id = query.get("data_source_id")
        if datasource_ids is not None and isinstance(ds_id, str) and ds_id not in datasource_ids:
            out.append(
                Violation(
                    to_pointer(path + ["data_source_id"]),
                    ViolationCode.CONSISTENCY,
                    f"{to_location(path + ['data_source_id'])} {ds_id!r} does not match any datasources[].id",
                )
            )

        sql = query.get("sql")
        if not isinstance(sql, str):
            continue
        params = query.get("params")
        bound = set(params) if isinstance(params, Mapping) else set()
        for name in sql_placeholders(sql):
            if name in bound or name in parameter_names:
                continue
            out.append(
                Violation(
                    to_pointer(path + ["sql"]),
                    ViolationCode.CONSISTENCY,
                    f"{to_location(path + ['sql'])} uses placeholder :{name} "
                    "with no value in params and no declared parameter",
                    Severity.WARNING,
                )
            )

    for path, visual in _iter_visuals(document):
        verify = visual.get("verify")
        if isinstance(verify, Mapping):
            out.extend(_check_verify(path + ["verify"], verify))
        options = visual.get("options")
        if isinstance(options, Mapping):
            out.extend(_check_options(path + ["options"], visual.get("kind"), options))

    return out


def _check_parameters(document: Mapping[str, Any], out: list[Violation]) -> set[str]:
    names: set[str] = set()
    parameters = document.get("parameters")
    if not isinstance(parameters, list):
        return names

    first_seen: dict[str, int] = {}
    for i, param in enumerate(parameters):
        if not isinstance(param, Mapping):
            continue
        name = param.get("name")
        if isinstance(name, str):
            if name in first_seen:
                out.append(
                    Violation(
                        to_pointer(["parameters", i, "name"]),
                        ViolationCode.CONSISTENCY,
                        f"parameters[{i}].name {name!r} duplicates parameters[{first_seen[name]}].name",
                    )
                )
            first_seen.setdefault(name, i)
            names.add(name)

        allowed = param.get("allowed")
        if param.get("type") == "enum" and not (isinstance(allowed, list) and allowed):
            out.append(
                Violation(
                    to_pointer(["parameters", i, "allowed"]),
                    ViolationCode.CONSISTENCY,
                    f"parameters[{i}].allowed must list the values of an enum parameter",
                )
            )
        if "default" in param and isinstance(allowed, list) and allowed and param["default"] not in allowed:
            out.append(
                Violation(
                    to_pointer(["parameters", i, "default"]),
                    ViolationCode.CONSISTENCY,
                    f"parameters[{i}].default {param['default']!r} is not one of parameters[{i}].allowed",
                )
            )
    return names


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_verify(path: list[str | int], verify: Mapping[str, Any]) -> list[Violation]:
    out: list[Violation] = []

    row_count = verify.get("row_count")
    if isinstance(row_count, Mapping):
        rc_path = path + ["row_count"]
        loc = to_location(rc_path)
        low, high, eq = row_count.get("min"), row_count.get("max"), row_count.get("eq")
        if _is_number(low) and _is_number(high) and low > high:
            out.append(
                Violation(to_pointer(rc_path), ViolationCode.CONSISTENCY, f"{loc}.min ({low}) must be <= max ({high})")
            )
        if _is_number(eq) and ((_is_number(low) and eq < low) or (_is_number(high) and eq > high)):
            out.append(
                Violation(
                    to_pointer(rc_path),
                    ViolationCode.CONSISTENCY,
                    f"{loc}.eq ({eq}) contradicts the min/max bounds",
                )
            )

    columns = verify.get("columns")
    if isinstance(columns, list):
        first_seen: dict[str, int] = {}
        for i, rule in enumerate(columns):
            if not isinstance(rule, Mapping) or not isinstance(rule.get("name"), str):
                continue
            name = rule["name"]
            if name in first_seen:
                col_path = path + ["columns", i, "name"]
                out.append(
                    Violation(
                        to_pointer(col_path),
                        ViolationCode.CONSISTENCY,
                        f"{to_location(col_path)} {name!r} is already described by columns[{first_seen[name]}]",
                    )
                )
            first_seen.setdefault(name, i)

    value_checks = verify.get("value_checks")
    if isinstance(value_checks, list):
        for i, check in enumerate(value_checks):
            if not isinstance(check, Mapping):
                continue
            check_path = path + ["value_checks", i]
            numeric_range = check.get("numeric_range")
            if isinstance(numeric_range, Mapping):
                low, high = numeric_range.get("min"), numeric_range.get("max")
                if _is_number(low) and _is_number(high) and low > high:
                    nr_path = check_path + ["numeric_range"]
                    out.append(
                        Violation(
                            to_pointer(nr_path),
                            ViolationCode.CONSISTENCY,
                            f"{to_location(nr_path)}.min ({low}) must be <= max ({high})",
                        )
                    )
            regex = check.get("regex")
            if isinstance(regex, str):
                try:
                    re.compile(regex)
                except re.error as exc:
                    rx_path = check_path + ["regex"]
                    out.append(
                        Violation(
                            to_pointer(rx_path),
                            ViolationCode.CONSISTENCY,
                            f"{to_location(rx_path)} is not a valid regular expression: {exc}",
                        )
                    )
    return out


def _check_options(path: list[str | int], kind: Any, options: Mapping[str, Any]) -> list[Violation]:
    out: list[Violation] = []

    if kind == "table" and isinstance(options.get("columns"), list):
        first_seen: dict[str, int] = {}
        for i, column in enumerate(options["columns"]):
            if not isinstance(column, Mapping) or not isinstance(column.get("field"), str):
                continue
            field_name = column["field"]
            if field_name in first_seen:
                col_path = path + ["columns", i, "field"]
                out.append(
                    Violation(
                        to_pointer(col_path),
                        ViolationCode.CONSISTENCY,
                        f"{to_location(col_path)} {field_name!r} is already shown by columns[{first_seen[field_name]}]",
                    )
                )
            first_seen.setdefault(field_name, i)

    if kind in ("bar", "pie"):
        category, value = options.get("category_field"), options.get("value_field")
        if isinstance(category, str) and category and category == value:
            out.append(
                Violation(
                    to_pointer(path + ["value_field"]),
                    ViolationCode.CONSISTENCY,
                    f"{to_location(path + ['value_field'])} must differ from category_field",
                )
            )

    if kind == "pie" and "inner_radius" in options and options.get("donut") is not True:
        out.append(
            Violation(
                to_pointer(path + ["inner_radius"]),
                ViolationCode.CONSISTENCY,
                f"{to_location(path + ['inner_radius'])} only applies when donut is true",
                Severity.WARNING,
            )
        )
    return out


def _matching_paths(node: Any, segments: Sequence[str], prefix: list[str | int]) -> Iterator[list[str | int]]:
    if not segments:
        yield prefix
        return
    head, rest = segments[0], segments[1:]
    if isinstance(node, Mapping):
        keys = list(node) if head == "*" else ([head] if head in node else [])
        for key in keys:
            yield from _matching_paths(node[key], rest, prefix + [key])
    elif isinstance(node, list):
        if head == "*":
            indices = range(len(node))
        elif head.isdigit() and int(head) < len(node):
            indices = range(int(head), int(head) + 1)
        else:
            indices = range(0)
        for index in indices:
            yield from _matching_paths(node[index], rest, prefix + [index])


def _check_deprecated(document: Any, fields: Sequence[DeprecatedField], target: str) -> list[Violation]:
    out: list[Violation] = []
    for deprecated in fields:
        if not deprecated.active_in(target):
            continue
        removal = SemVer.parse(deprecated.deprecated_in).major + 1
        for path in _matching_paths(document, deprecated.segments, []):
            message = f"{to_location(path)} is deprecated since {deprecated.deprecated_in}"
            if deprecated.replacement:
                message += f"; use {deprecated.replacement}"
            message += (
                f" (accepted through at least {deprecated.guaranteed_through},"
                f" removed no earlier than the {removal}.0.0 contract)"
            )
            out.append(Violation(to_pointer(path), ViolationCode.DEPRECATED_FIELD, message, Severity.WARNING))
    return out
