"""Report page contract: JSON Schema and validator.

A report page is a document made of rows of KPI tiles, tables, annotations
and charts, each visual optionally carrying an embedded SQL query and
``verify`` assertions. This package ships the versioned schema and a
validator that reports every violation in one pass. It does not run queries
or render anything; that is left to report runners.
"""

from .errors import (
    InvalidSchemaError,
    ReportPageContractError,
    ReportPageValidationError,
    SchemaNotFoundError,
    UnsupportedVersionError,
)
from .schema import SUPPORTED_VERSIONS, load_schema, resolve_schema_path
from .types import ReportPage, load_report_page
from .validate import assert_valid_report_page, validate_report_page, validate_report_page_file
from .versioning import CURRENT_VERSION
from .violations import Severity, ValidationReport, Violation, ViolationCode

__all__ = [
    "CURRENT_VERSION",
    "InvalidSchemaError",
    "ReportPage",
    "ReportPageContractError",
    "ReportPageValidationError",
    "SUPPORTED_VERSIONS",
    "SchemaNotFoundError",
    "Severity",
    "UnsupportedVersionError",
    "ValidationReport",
    "Violation",
    "ViolationCode",
    "assert_valid_report_page",
    "load_report_page",
    "load_schema",
    "resolve_schema_path",
    "validate_report_page",
    "validate_report_page_file",
]
