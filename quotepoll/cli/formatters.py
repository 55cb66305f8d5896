"""Rendering of report and series rows for CLI commands."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Mapping, Sequence, TextIO

from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table

from quotepoll.core.models.series import MISSING, NUMERIC_FIELDS, PLACEHOLDER

Row = Mapping[str, object]

# right-aligned in tables
NUMERIC_COLUMNS = frozenset({*NUMERIC_FIELDS, "batch"})


def _plain(value: object) -> object:
    return PLACEHOLDER if value is MISSING else value


class OutputFormatter:
    """Base class for CLI output formatters."""

    name: str

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str], title: str | None = None) -> None:
        raise NotImplementedError


@dataclass(slots=True)
class TableFormatter(OutputFormatter):
    """Rich table with one row per symbol outcome or series day."""

    name: str = "table"
    no_color: bool = False

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str], title: str | None = None) -> None:
        console = Console(file=stream, color_system=None if self.no_color else "auto", no_color=self.no_color)
        if not rows:
            console.print("No data available.")
            return

        table = Table(box=SIMPLE, title=title, header_style="" if self.no_color else "bold")
        for column in columns:
            table.add_column(column, justify="right" if column in NUMERIC_COLUMNS else "left")
        for row in rows:
            table.add_row(*(self._cell(row.get(column)) for column in columns))
        console.print(table)

    @staticmethod
    def _cell(value: object) -> str:
        if value is None:
            return ""
        return str(_plain(value))


@dataclass(slots=True)
class JSONLFormatter(OutputFormatter):
    """One JSON object per row, ``MISSING`` written as ``"-"``."""

    name: str = "jsonl"

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str], title: str | None = None) -> None:
        for row in rows:
            payload = {column: _plain(row.get(column)) for column in columns}
            stream.write(json.dumps(payload, ensure_ascii=False, default=str))
            stream.write("\n")
        stream.flush()


def create_formatter(name: str, *, no_color: bool = False) -> OutputFormatter:
    normalized = name.strip().lower()
    if normalized == "table":
        return TableFormatter(no_color=no_color)
    if normalized == "jsonl":
        return JSONLFormatter()
    raise ValueError(f"Unsupported format '{name}'. Available formats: table, jsonl.")


__all__ = ["JSONLFormatter", "NUMERIC_COLUMNS", "OutputFormatter", "TableFormatter", "create_formatter"]
