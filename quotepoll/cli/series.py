"""The ``series`` command: inspect the stored daily series of a symbol."""

from __future__ import annotations

import typer

from quotepoll.core.data.store import JsonSeriesStore
from quotepoll.core.exceptions import StoreReadError
from quotepoll.core.models.series import NUMERIC_FIELDS

from .constants import STORE_EXIT_CODE, VALIDATION_EXIT_CODE
from .utils import emit_error, prepare_output, resolve_config

SERIES_COLUMNS = ["date", *NUMERIC_FIELDS]


def register(app: typer.Typer) -> None:
    """Register the series command on the provided application."""

    app.command("series", help="Show the stored daily series of a symbol")(series_command)


def series_command(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Symbol code, e.g. 2330."),
    limit: int = typer.Option(20, "--limit", help="Number of most recent rows to show (0 for all)."),
) -> None:
    """Render the rows stored for ``symbol``."""

    if limit < 0:
        emit_error("Limit must not be negative.", "INVALID_LIMIT", details={"limit": limit})
        raise typer.Exit(code=VALIDATION_EXIT_CODE)

    config = resolve_config(ctx)
    store = JsonSeriesStore(config.store.data_dir, config.store.filename)
    try:
        series = store.read(symbol.strip())
    except StoreReadError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=STORE_EXIT_CODE) from error

    if limit:
        series = series[-limit:]
    rows = [dict(zip(SERIES_COLUMNS, row.to_list())) for row in series]

    formatter, stream, stack, _ = prepare_output(ctx)
    try:
        formatter.render(rows, stream=stream, columns=SERIES_COLUMNS, title=symbol)
    finally:
        stack.close()


__all__ = ["SERIES_COLUMNS", "register", "series_command"]
