from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Iterator, Mapping, Union


class Align(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class SqlDriver(str, Enum):
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MSSQL = "mssql"
    CLICKHOUSE = "clickhouse"
    SQLITE = "sqlite"
    SNOWFLAKE = "snowflake"


class ParameterType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    ENUM = "enum"


class ColumnPrimitive(str, Enum):
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"


class TableColumnFormat(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    PERCENT = "percent"
    CURRENCY = "currency"
    DATE = "date"
    DATETIME = "datetime"
    DURATION = "duration"


class RowType(str, Enum):
    TILES = "tiles"
    TABLE = "table"
    ANNOTATION = "annotation"
    CHARTS = "charts"


class VisualKind(str, Enum):
    TILE = "tile"
    TABLE = "table"
    ANNOTATION = "annotation"
    BAR = "bar"
    PIE = "pie"


class SortBy(str, Enum):
    CATEGORY = "category"
    VALUE = "value"


class SortDir(str, Enum):
    ASC = "asc"
    DESC = "desc"


class LegendPosition(str, Enum):
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"
    NONE = "none"


class Orientation(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class PieLabelType(str, Enum):
    PERCENT = "percent"
    VALUE = "value"
    CATEGORY = "category"
    NONE = "none"


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Marks an absent field whose JSON value may legitimately be null.
MISSING: Any = _Missing()


def _encode(value: Any) -> Any:
    if isinstance(value, _Node):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): _encode(v) for k, v in value.items()}
    return value


def _opt(obj: Mapping[str, Any], key: str, convert: Any = None) -> Any:
    value = obj.get(key)
    if value is None:
        return None
    return convert(value) if convert is not None else value


def _opt_list(obj: Mapping[str, Any], key: str, convert: Any = None) -> tuple[Any, ...] | None:
    value = obj.get(key)
    if value is None:
        return None
    return tuple(convert(v) if convert is not None else v for v in value)


class _Node:
    """JSON encoding shared by every contract node.

    Unset optional fields (``None``) are omitted. Tagged variants emit their
    discriminator first.
    """

    _tag: ClassVar[tuple[str, str] | None] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self._tag is not None:
            out[self._tag[0]] = self._tag[1]
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is MISSING or (value is None and not f.metadata.get("nullable")):
                continue
            out[f.name] = _encode(value)
        return out

    @classmethod
    def _check_tag(cls, obj: Mapping[str, Any]) -> None:
        if not isinstance(obj, Mapping):
            raise TypeError(f"{cls.__name__} expects an object, got {type(obj).__name__}")
        if cls._tag is not None and obj.get(cls._tag[0]) != cls._tag[1]:
            raise ValueError(
                f"{cls.__name__} requires {cls._tag[0]}={cls._tag[1]!r}, got {obj.get(cls._tag[0])!r}"
            )


@dataclass(frozen=True)
class Author(_Node):
    id: str
    name: str
    email: str | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Author":
        return cls(id=obj["id"], name=obj["name"], email=_opt(obj, "email"))


@dataclass(frozen=True)
class Meta(_Node):
    schema_version: str
    last_updated: str
    updated_by: Author
    report_id: str | None = None
    slug: str | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Meta":
        return cls(
            schema_version=obj["schema_version"],
            last_updated=obj["last_updated"],
            updated_by=Author.from_dict(obj["updated_by"]),
            report_id=_opt(obj, "report_id"),
            slug=_opt(obj, "slug"),
        )


@dataclass(frozen=True)
class Theme(_Node):
    bg_color: str | None = None
    font_color: str | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Theme":
        return cls(bg_color=_opt(obj, "bg_color"), font_color=_opt(obj, "font_color"))


@dataclass(frozen=True)
class Layout(_Node):
    """Row placement. ``span`` is in grid columns (1-12); unset means full width."""

    span: int | None = None
    order: int | None = None
    align: Align | None = None
    responsive: bool | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Layout":
        return cls(
            span=_opt(obj, "span"),
            order=_opt(obj, "order"),
            align=_opt(obj, "align", Align),
            responsive=_opt(obj, "responsive"),
        )


@dataclass(frozen=True)
class Design(_Node):
    bg_color: str | None = None
    font_color: str | None = None
    horizontal_rule: bool | None = None
    padding: str | None = None
    css_class: str | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Design":
        return cls(**{f.name: _opt(obj, f.name) for f in fields(cls)})


@dataclass(frozen=True)
class Connection(_Node):
    """How a runner reaches a datasource; ``env`` names an environment variable holding the DSN."""

    env: str | None = None
    dsn: str | None = None
    database: str | None = None
    host: str | None = None
    port: int | None = None
    ssl: bool | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Connection":
        return cls(**{f.name: _opt(obj, f.name) for f in fields(cls)})


@dataclass(frozen=True)
class Datasource(_Node):
    id: str
    driver: SqlDriver
    connection: Connection | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Datasource":
        return cls(
            id=obj["id"],
            driver=SqlDriver(obj["driver"]),
            connection=_opt(obj, "connection", Connection.from_dict),
        )


@dataclass(frozen=True)
class Parameter(_Node):
    """A report-level input bound to ``:name`` placeholders in queries.

    ``default`` is ``MISSING`` when absent, so an explicit JSON ``null``
    default survives a round trip.
    """

    name: str
    type: ParameterType
    label: str | None = None
    required: bool | None = None
    default: Any = field(default=MISSING, metadata={"nullable": True})
    allowed: tuple[Any, ...] | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Parameter":
        return cls(
            name=obj["name"],
            type=ParameterType(obj["type"]),
            label=_opt(obj, "label"),
            required=_opt(obj, "required"),
            default=obj["default"] if "default" in obj else MISSING,
            allowed=_opt_list(obj, "allowed"),
            description=_opt(obj, "description"),
        )


@dataclass(frozen=True)
class Query(_Node):
    """SQL with named ``:name`` placeholders. Never parsed or executed here."""

    sql: str
    id: str | None = None
    data_source_id: str | None = None
    params: Mapping[str, str | int | float | bool] | None = None
    timeout_ms: int | None = None
    row_limit: int | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Query":
        return cls(
            sql=obj["sql"],
            id=_opt(obj, "id"),
            data_source_id=_opt(obj, "data_source_id"),
            params=_opt(obj, "params", dict),
            timeout_ms=_opt(obj, "timeout_ms"),
            row_limit=_opt(obj, "row_limit"),
        )


@dataclass(frozen=True)
class RowCount(_Node):
    eq: int | None = None
    min: int | None = None
    max: int | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "RowCount":
        return cls(eq=_opt(obj, "eq"), min=_opt(obj, "min"), max=_opt(obj, "max"))


@dataclass(frozen=True)
class ColumnRule(_Node):
    name: str
    type: ColumnPrimitive
    index: int | None = None
    max_length: int | None = None
    nullable: bool | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "ColumnRule":
        return cls(
            name=obj["name"],
            type=ColumnPrimitive(obj["type"]),
            index=_opt(obj, "index"),
            max_length=_opt(obj, "max_length"),
            nullable=_opt(obj, "nullable"),
        )


@dataclass(frozen=True)
class NumericRange(_Node):
    min: float | None = None
    max: float | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "NumericRange":
        return cls(min=_opt(obj, "min"), max=_opt(obj, "max"))


@dataclass(frozen=True)
class ValueCheck(_Node):
    column: str
    numeric_range: NumericRange | None = None
    regex: str | None = None
    allowed_set: tuple[Any, ...] | None = None
    unique: bool | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "ValueCheck":
        return cls(
            column=obj["column"],
            numeric_range=_opt(obj, "numeric_range", NumericRange.from_dict),
            regex=_opt(obj, "regex"),
            allowed_set=_opt_list(obj, "allowed_set"),
            unique=_opt(obj, "unique"),
        )


@dataclass(frozen=True)
class Verify(_Node):
    """Assertions a report runner applies to actual query results."""

    row_count: RowCount | None = None
    columns: tuple[ColumnRule, ...] | None = None
    value_checks: tuple[ValueCheck, ...] | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "Verify":
        return cls(
            row_count=_opt(obj, "row_count", RowCount.from_dict),
            columns=_opt_list(obj, "columns", ColumnRule.from_dict),
            value_checks=_opt_list(obj, "value_checks", ValueCheck.from_dict),
        )


@dataclass(frozen=True)
class TileOptions(_Node):
    """``show_delta`` unset behaves as false; ``delta_query`` is only read when it is true."""

    prefix: str | None = None
    suffix: str | None = None
    precision: int | None = None
    target: float | None = None
    show_delta: bool | None = None
    delta_query: Query | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "TileOptions":
        return cls(
            prefix=_opt(obj, "prefix"),
            suffix=_opt(obj, "suffix"),
            precision=_opt(obj, "precision"),
            target=_opt(obj, "target"),
            show_delta=_opt(obj, "show_delta"),
            delta_query=_opt(obj, "delta_query", Query.from_dict),
        )


@dataclass(frozen=True)
class TableColumn(_Node):
    field: str
    label: str | None = None
    align: Align | None = None
    format: TableColumnFormat | None = None
    precision: int | None = None
    width: int | float | str | None = None
    sortable: bool | None = None
    truncate: bool | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "TableColumn":
        return cls(
            field=obj["field"],
            label=_opt(obj, "label"),
            align=_opt(obj, "align", Align),
            format=_opt(obj, "format", TableColumnFormat),
            precision=_opt(obj, "precision"),
            width=_opt(obj, "width"),
            sortable=_opt(obj, "sortable"),
            truncate=_opt(obj, "truncate"),
        )


@dataclass(frozen=True)
class TableOptions(_Node):
    """Unset ``columns`` means every result column is shown in query order."""

    paginate: bool | None = None
    page_size: int | None = None
    columns: tuple[TableColumn, ...] | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "TableOptions":
        return cls(
            paginate=_opt(obj, "paginate"),
            page_size=_opt(obj, "page_size"),
            columns=_opt_list(obj, "columns", TableColumn.from_dict),
        )


@dataclass(frozen=True)
class AnnotationOptions(_Node):
    section_name: str | None = None
    subtitle: str | None = None
    text: str | None = None
    markdown: bool | None = None
    design: Design | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "AnnotationOptions":
        return cls(
            section_name=_opt(obj, "section_name"),
            subtitle=_opt(obj, "subtitle"),
            text=_opt(obj, "text"),
            markdown=_opt(obj, "markdown"),
            design=_opt(obj, "design", Design.from_dict),
        )


@dataclass(frozen=True)
class ChartOptions(_Node):
    """Options shared by bar and pie charts.

    Unset booleans keep the runner's default: ``show_legend`` and
    ``show_tooltips`` behave as true. ``category_field`` and ``value_field``
    name result columns; they are not checked against the SQL.
    """

    category_field: str
    value_field: str
    series_field: str | None = None
    sort_by: SortBy | None = None
    sort_dir: SortDir | None = None
    top_n: int | None = None
    show_legend: bool | None = None
    legend_position: LegendPosition | None = None
    show_tooltips: bool | None = None
    palette: tuple[str, ...] | None = None

    @classmethod
    def _common_kwargs(cls, obj: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "category_field": obj["category_field"],
            "value_field": obj["value_field"],
            "series_field": _opt(obj, "series_field"),
            "sort_by": _opt(obj, "sort_by", SortBy),
            "sort_dir": _opt(obj, "sort_dir", SortDir),
            "top_n": _opt(obj, "top_n"),
            "show_legend": _opt(obj, "show_legend"),
            "legend_position": _opt(obj, "legend_position", LegendPosition),
            "show_tooltips": _opt(obj, "show_tooltips"),
            "palette": _opt_list(obj, "palette"),
        }


@dataclass(frozen=True)
class BarOptions(ChartOptions):
    orientation: Orientation | None = None
    show_value_labels: bool | None = None
    precision: int | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "BarOptions":
        return cls(
            **cls._common_kwargs(obj),
            orientation=_opt(obj, "orientation", Orientation),
            show_value_labels=_opt(obj, "show_value_labels"),
            precision=_opt(obj, "precision"),
        )


@dataclass(frozen=True)
class PieOptions(ChartOptions):
    """``inner_radius`` is a fraction of the outer radius and only applies to donuts."""

    donut: bool | None = None
    inner_radius: float | None = None
    label_type: PieLabelType | None = None
    precision: int | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "PieOptions":
        return cls(
            **cls._common_kwargs(obj),
            donut=_opt(obj, "donut"),
            inner_radius=_opt(obj, "inner_radius"),
            label_type=_opt(obj, "label_type", PieLabelType),
            precision=_opt(obj, "precision"),
        )


@dataclass(frozen=True)
class TileVisual(_Node):
    _tag: ClassVar[tuple[str, str]] = ("kind", VisualKind.TILE.value)

    label: str
    query: Query
    hint: str | None = None
    color: str | None = None
    verify: Verify | None = None
    options: TileOptions | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "TileVisual":
        cls._check_tag(obj)
        return cls(
            label=obj["label"],
            query=Query.from_dict(obj["query"]),
            hint=_opt(obj, "hint"),
            color=_opt(obj, "color"),
            verify=_opt(obj, "verify", Verify.from_dict),
            options=_opt(obj, "options", TileOptions.from_dict),
        )


@dataclass(frozen=True)
class TableVisual(_Node):
    _tag: ClassVar[tuple[str, str]] = ("kind", VisualKind.TABLE.value)

    label: str
    query: Query
    hint: str | None = None
    color: str | None = None
    verify: Verify | None = None
    options: TableOptions | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "TableVisual":
        cls._check_tag(obj)
        return cls(
            label=obj["label"],
            query=Query.from_dict(obj["query"]),
            hint=_opt(obj, "hint"),
            color=_opt(obj, "color"),
            verify=_opt(obj, "verify", Verify.from_dict),
            options=_opt(obj, "options", TableOptions.from_dict),
        )


@dataclass(frozen=True)
class AnnotationVisual(_Node):
    """Static text; the only visual without a query."""

    _tag: ClassVar[tuple[str, str]] = ("kind", VisualKind.ANNOTATION.value)

    label: str | None = None
    hint: str | None = None
    color: str | None = None
    options: AnnotationOptions | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "AnnotationVisual":
        cls._check_tag(obj)
        return cls(
            label=_opt(obj, "label"),
            hint=_opt(obj, "hint"),
            color=_opt(obj, "color"),
            options=_opt(obj, "options", AnnotationOptions.from_dict),
        )


@dataclass(frozen=True)
class BarVisual(_Node):
    _tag: ClassVar[tuple[str, str]] = ("kind", VisualKind.BAR.value)

    label: str
    query: Query
    options: BarOptions
    hint: str | None = None
    color: str | None = None
    verify: Verify | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "BarVisual":
        cls._check_tag(obj)
        return cls(
            label=obj["label"],
            query=Query.from_dict(obj["query"]),
            options=BarOptions.from_dict(obj["options"]),
            hint=_opt(obj, "hint"),
            color=_opt(obj, "color"),
            verify=_opt(obj, "verify", Verify.from_dict),
        )


@dataclass(frozen=True)
class PieVisual(_Node):
    _tag: ClassVar[tuple[str, str]] = ("kind", VisualKind.PIE.value)

    label: str
    query: Query
    options: PieOptions
    hint: str | None = None
    color: str | None = None
    verify: Verify | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "PieVisual":
        cls._check_tag(obj)
        return cls(
            label=obj["label"],
            query=Query.from_dict(obj["query"]),
            options=PieOptions.from_dict(obj["options"]),
            hint=_opt(obj, "hint"),
            color=_opt(obj, "color"),
            verify=_opt(obj, "verify", Verify.from_dict),
        )


ChartVisual = Union[BarVisual, PieVisual]
Visual = Union[TileVisual, TableVisual, AnnotationVisual, BarVisual, PieVisual]

CHART_VISUALS: dict[str, type[BarVisual] | type[PieVisual]] = {
    VisualKind.BAR.value: BarVisual,
    VisualKind.PIE.value: PieVisual,
}


def chart_visual_from_dict(obj: Mapping[str, Any]) -> ChartVisual:
    kind = obj.get("kind") if isinstance(obj, Mapping) else None
    cls = CHART_VISUALS.get(kind)  # type: ignore[arg-type]
    if cls is None:
        raise ValueError(f"charts rows hold bar or pie visuals, got kind={kind!r}")
    return cls.from_dict(obj)


@dataclass(frozen=True)
class _RowBase(_Node):
    title: str | None = None
    subtitle: str | None = None
    layout: Layout | None = None
    design: Design | None = None

    @classmethod
    def _common_kwargs(cls, obj: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "title": _opt(obj, "title"),
            "subtitle": _opt(obj, "subtitle"),
            "layout": _opt(obj, "layout", Layout.from_dict),
            "design": _opt(obj, "design", Design.from_dict),
        }

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        # Keep visuals last for readability of emitted documents.
        out["visuals"] = out.pop("visuals")
        return out


@dataclass(frozen=True)
class TilesRow(_RowBase):
    _tag: ClassVar[tuple[str, str]] = ("type", RowType.TILES.value)

    visuals: tuple[TileVisual, ...] = ()

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "TilesRow":
        cls._check_tag(obj)
        return cls(
            **cls._common_kwargs(obj),
            visuals=tuple(TileVisual.from_dict(v) for v in obj["visuals"]),
        )


@dataclass(frozen=True)
class TableRow(_RowBase):
    _tag: ClassVar[tuple[str, str]] = ("type", RowType.TABLE.value)

    visuals: tuple[TableVisual, ...] = ()

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "TableRow":
        cls._check_tag(obj)
        return cls(
            **cls._common_kwargs(obj),
            visuals=tuple(TableVisual.from_dict(v) for v in obj["visuals"]),
        )


@dataclass(frozen=True)
class AnnotationRow(_RowBase):
    _tag: ClassVar[tuple[str, str]] = ("type", RowType.ANNOTATION.value)

    visuals: tuple[AnnotationVisual, ...] = ()

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "AnnotationRow":
        cls._check_tag(obj)
        return cls(
            **cls._common_kwargs(obj),
            visuals=tuple(AnnotationVisual.from_dict(v) for v in obj["visuals"]),
        )


@dataclass(frozen=True)
class ChartsRow(_RowBase):
    _tag: ClassVar[tuple[str, str]] = ("type", RowType.CHARTS.value)

    visuals: tuple[ChartVisual, ...] = ()

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "ChartsRow":
        cls._check_tag(obj)
        return cls(
            **cls._common_kwargs(obj),
            visuals=tuple(chart_visual_from_dict(v) for v in obj["visuals"]),
        )


Row = Union[TilesRow, TableRow, AnnotationRow, ChartsRow]

ROW_TYPES: dict[str, Any] = {
    RowType.TILES.value: TilesRow,
    RowType.TABLE.value: TableRow,
    RowType.ANNOTATION.value: AnnotationRow,
    RowType.CHARTS.value: ChartsRow,
}


def row_from_dict(obj: Mapping[str, Any]) -> Row:
    row_type = obj.get("type") if isinstance(obj, Mapping) else None
    cls = ROW_TYPES.get(row_type)  # type: ignore[arg-type]
    if cls is None:
        raise ValueError(f"Unknown row type: {row_type!r}")
    return cls.from_dict(obj)


@dataclass(frozen=True)
class ReportPage(_Node):
    """A report page document.

    Build it from a document that has already passed validation; ``from_dict``
    only dispatches on the row and visual tags and does not re-check the
    contract. ``to_dict(from_dict(doc)) == doc`` for any valid document that
    carries no unknown fields.
    """

    title: str
    meta: Meta
    rows: tuple[Row, ...]
    subtitle: str | None = None
    datasources: tuple[Datasource, ...] | None = None
    parameters: tuple[Parameter, ...] | None = None
    theme: Theme | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "ReportPage":
        return cls(
            title=obj["title"],
            meta=Meta.from_dict(obj["meta"]),
            rows=tuple(row_from_dict(r) for r in obj["rows"]),
            subtitle=_opt(obj, "subtitle"),
            datasources=_opt_list(obj, "datasources", Datasource.from_dict),
            parameters=_opt_list(obj, "parameters", Parameter.from_dict),
            theme=_opt(obj, "theme", Theme.from_dict),
        )

    def iter_visuals(self) -> Iterator[tuple[int, int, Visual]]:
        for i, row in enumerate(self.rows):
            for j, visual in enumerate(row.visuals):
                yield i, j, visual

    def iter_queries(self) -> Iterator[tuple[int, int, Query]]:
        """Every query a runner has to execute, including tile delta queries."""

        for i, j, visual in self.iter_visuals():
            query = getattr(visual, "query", None)
            if query is not None:
                yield i, j, query
            options = getattr(visual, "options", None)
            delta = getattr(options, "delta_query", None)
            if delta is not None:
                yield i, j, delta


def load_report_page(document: Mapping[str, Any], **kwargs: Any) -> ReportPage:
    """Validate a document and build its in-memory representation.

    Raises ReportPageValidationError if the document is invalid.
    """

    from .validate import assert_valid_report_page

    assert_valid_report_page(document, **kwargs)
    return ReportPage.from_dict(document)
