"""The ``run`` command: poll one session and merge results into storage."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Mapping, Sequence

import typer

from quotepoll.core.config import QuotePollConfig
from quotepoll.core.data.source import TwseQuoteSource
from quotepoll.core.data.universe import load_universe
from quotepoll.core.exceptions import ConfigError, UniverseLoadError
from quotepoll.core.models.market import SymbolDescriptor
from quotepoll.core.services.session import SessionReport, SessionRunner

from .constants import UNIVERSE_EXIT_CODE, VALIDATION_EXIT_CODE
from .utils import emit_error, prepare_output, resolve_config

REPORT_COLUMNS = ["symbol", "name", "status", "batch", "date", "close", "volume"]


def register(app: typer.Typer) -> None:
    """Register the run command on the provided application."""

    app.command("run", help="Poll quotes for the configured symbols and update stored series")(run_command)


def get_quote_source(config: QuotePollConfig) -> TwseQuoteSource:
    """Factory hook for obtaining the quote source used by a session."""

    return TwseQuoteSource(config.source)


def run_command(
    ctx: typer.Context,
    symbols: str | None = typer.Option(
        None,
        "--symbols",
        help="Comma separated symbol codes; overrides the configured allow-list.",
    ),
    stock_list: Path | None = typer.Option(None, "--stock-list", help="Path to stock_list.json."),
    data_dir: Path | None = typer.Option(None, "--data-dir", help="Directory holding per-symbol series."),
    batch_size: int | None = typer.Option(None, "--batch-size", help="Symbols per polling batch."),
    deadline: float | None = typer.Option(None, "--deadline", help="Seconds to poll each batch."),
    retry_interval: float | None = typer.Option(None, "--retry-interval", help="Seconds between ticks."),
) -> None:
    """Run one polling session and render the per-symbol outcome."""

    config = resolve_config(ctx)
    try:
        config = _apply_overrides(config, stock_list, data_dir, batch_size, deadline, retry_interval)
    except ConfigError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

    allow_list = _split_codes(symbols) if symbols is not None else list(config.universe.allow_list)
    if symbols is not None and not allow_list:
        emit_error("No symbols supplied for run command.", "SYMBOLS_MISSING")
        raise typer.Exit(code=VALIDATION_EXIT_CODE)

    try:
        universe = load_universe(config.universe.stock_list, allow_list)
    except UniverseLoadError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=UNIVERSE_EXIT_CODE) from error

    if not universe:
        emit_error("Symbol universe is empty.", "SYMBOLS_MISSING")
        raise typer.Exit(code=UNIVERSE_EXIT_CODE)

    formatter, stream, stack, _ = prepare_output(ctx)
    try:
        report = asyncio.run(_run_session(config, universe))
        formatter.render(_report_to_rows(report), stream=stream, columns=REPORT_COLUMNS)
    finally:
        stack.close()


async def _run_session(config: QuotePollConfig, universe: Sequence[SymbolDescriptor]) -> SessionReport:
    source = get_quote_source(config)
    try:
        runner = SessionRunner.from_config(config, source)
        return await runner.run(universe)
    finally:
        await source.close()


def _apply_overrides(
    config: QuotePollConfig,
    stock_list: Path | None,
    data_dir: Path | None,
    batch_size: int | None,
    deadline: float | None,
    retry_interval: float | None,
) -> QuotePollConfig:
    poller = config.poller
    if batch_size is not None:
        poller = replace(poller, batch_size=batch_size)
    if deadline is not None:
        poller = replace(poller, deadline=deadline)
    if retry_interval is not None:
        poller = replace(poller, retry_interval=retry_interval)

    store = replace(config.store, data_dir=str(data_dir)) if data_dir is not None else config.store
    universe = replace(config.universe, stock_list=str(stock_list)) if stock_list is not None else config.universe
    return replace(config, poller=poller, store=store, universe=universe).validate()


def _split_codes(value: str) -> list[str]:
    return [code.strip() for code in value.split(",") if code.strip()]


def _report_to_rows(report: SessionReport) -> list[Mapping[str, object]]:
    rows: list[Mapping[str, object]] = []
    for outcome in report.outcomes:
        row = outcome.row
        rows.append(
            {
                "symbol": outcome.symbol.code,
                "name": outcome.symbol.name,
                "status": outcome.status.value,
                "batch": outcome.batch,
                "date": row.date if row else None,
                "close": row.close if row else None,
                "volume": row.volume if row else None,
            }
        )
    return rows


__all__ = ["REPORT_COLUMNS", "get_quote_source", "register", "run_command"]
