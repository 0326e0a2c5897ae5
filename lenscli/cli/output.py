"""
Output Rendering.

Every command prints its result through a Renderer. Exactly one mode is
active per invocation:

    json   - indented JSON of the full structure, camelCase keys
    table  - Rich table, columns derived from the model's fields
    names  - one identifying value per item
    lines  - one raw value per line

Narration ("Topic orders created") goes through info() and is muted by
--silent. Results go through render() and are never muted. Errors always
go to stderr.
"""

import json
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from typing import Any

import click
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table
from rich.text import Text

Column = tuple[str, Callable[[dict[str, Any]], Any]]


class OutputFormat(str, Enum):
    """Formats selectable with --output."""

    TABLE = "table"
    JSON = "json"


class OutputMode(str, Enum):
    """Resolved presentation mode for one invocation."""

    JSON = "json"
    TABLE = "table"
    NAMES = "names"
    LINES = "lines"


def select_mode(output: str, names: bool = False, unwrap: bool = False) -> OutputMode:
    """Pick the single active mode; --unwrap wins over --names, which wins over --output."""
    if unwrap:
        return OutputMode.LINES
    if names:
        return OutputMode.NAMES
    return OutputMode(output)


def to_plain(value: Any) -> Any:
    """Convert models (and containers of models) into JSON-ready data."""
    if isinstance(value, BaseModel):
        to_wire = getattr(value, "to_wire", None)
        if callable(to_wire):
            return to_wire()
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


def _humanize(name: str) -> str:
    return name.replace("_", " ").title()


def columns_for(model: type[BaseModel]) -> list[Column]:
    """
    Derive table columns from a model's fields.

    The header is the field title, or the humanised field name. Fields
    declared with json_schema_extra={"header": False} are left out.
    Accessors read the wire (camelCase) form of a row.
    """
    columns: list[Column] = []
    for name, field in model.model_fields.items():
        extra = field.json_schema_extra
        if isinstance(extra, dict) and extra.get("header") is False:
            continue
        key = field.alias or name
        columns.append((field.title or _humanize(name), lambda row, key=key: row.get(key)))
    return columns


def _cell(value: Any) -> Text:
    """Plain cell text; remote values are never read as Rich markup."""
    if value is None:
        return Text("")
    if isinstance(value, (dict, list)):
        return Text(json.dumps(value))
    return Text(str(value))


class Renderer:
    """
    Writes results and narration for one command invocation.

    Usage:
        out = Renderer(OutputMode.TABLE)
        out.render(topics, model=Topic, row_filter=lambda t: not t.is_control_topic)
        out.info("Topic orders created")
    """

    def __init__(self, mode: OutputMode, silent: bool = False, no_newline: bool = False) -> None:
        self.mode = mode
        self.silent = silent
        self.no_newline = no_newline

    def render(
        self,
        value: Any,
        model: type[BaseModel] | None = None,
        columns: Sequence[Column] | None = None,
        row_filter: Callable[[Any], bool] | None = None,
        name: Callable[[Any], Any] | None = None,
    ) -> None:
        """
        Print a result in the active mode.

        Args:
            value: A model, a list of models, or plain JSON-like data.
            model: Model used to derive table columns.
            columns: Explicit table columns; take precedence over model.
            row_filter: Keeps only matching items, table mode only.
            name: Identifying value of an item, for names and lines modes.
        """
        if self.mode is OutputMode.JSON:
            click.echo(json.dumps(to_plain(value), indent=2))
            return

        items = list(value) if isinstance(value, (list, tuple)) else [value]

        if self.mode is OutputMode.NAMES:
            self.names([name(item) if name else item for item in items])
        elif self.mode is OutputMode.LINES:
            self.lines([name(item) if name else item for item in items])
        else:
            if row_filter is not None:
                items = [item for item in items if row_filter(item)]
            self.table(items, model=model, columns=columns)

    def render_mapping(
        self,
        mapping: dict[str, Any],
        headers: tuple[str, str] = ("Key", "Value"),
    ) -> None:
        """Print a flat mapping: as-is in JSON, one row per entry in a table, keys as names."""
        if self.mode is OutputMode.JSON:
            click.echo(json.dumps(to_plain(mapping), indent=2))
        elif self.mode is OutputMode.NAMES:
            self.names(list(mapping))
        elif self.mode is OutputMode.LINES:
            self.lines([f"{key}={value}" for key, value in mapping.items()])
        else:
            key_header, value_header = headers
            self.table(
                [{"key": key, "value": value} for key, value in mapping.items()],
                columns=[
                    (key_header, lambda row: row["key"]),
                    (value_header, lambda row: row["value"]),
                ],
            )

    def table(
        self,
        items: Iterable[Any],
        model: type[BaseModel] | None = None,
        columns: Sequence[Column] | None = None,
    ) -> None:
        rows = [to_plain(item) for item in items]

        if columns is None and model is not None:
            columns = columns_for(model)
        if columns is None:
            if rows and all(isinstance(row, dict) for row in rows):
                keys = list(dict.fromkeys(key for row in rows for key in row))
                columns = [(_humanize(key), lambda row, key=key: row.get(key)) for key in keys]
            else:
                columns = [("Value", lambda row: row)]

        table = Table(show_header=True, header_style="bold")
        for header, _ in columns:
            table.add_column(Text(header))
        for row in rows:
            table.add_row(*(_cell(accessor(row)) for _, accessor in columns))

        Console().print(table)

    def names(self, names: Sequence[Any]) -> None:
        """Names-only output: newline-joined, or space-joined with no_newline."""
        values = [str(name) for name in names]
        if self.no_newline:
            click.echo(" ".join(values), nl=False)
        elif values:
            click.echo("\n".join(values))

    def lines(self, values: Sequence[Any]) -> None:
        """One raw value per line; no_newline drops only the final line break."""
        last = len(values) - 1
        for index, value in enumerate(values):
            click.echo(str(value), nl=not (self.no_newline and index == last))

    def info(self, message: str) -> None:
        """Narration, muted by silent."""
        if not self.silent:
            click.echo(message)

    def error(self, message: str) -> None:
        """Errors go to stderr regardless of silent."""
        click.echo(f"Error: {message}", err=True)
