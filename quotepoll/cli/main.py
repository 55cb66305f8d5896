"""Main entry point for the quotepoll command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from .formatters import create_formatter
from .run import register as register_run_command
from .series import register as register_series_command
from .utils import configure_cli_logging


def create_app() -> typer.Typer:
    """Create a Typer application instance for quotepoll."""

    app = typer.Typer(add_completion=False, help="quotepoll command line interface")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str = typer.Option(
            "table",
            "--format",
            "-f",
            help="Output format (table or jsonl).",
            show_default=True,
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write output to a file instead of stdout.",
        ),
        config: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help="Path to a quotepoll.toml configuration file.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Logging level; defaults to the configured level.",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output for table format.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        normalized_format = format.strip().lower()
        try:
            create_formatter(normalized_format, no_color=no_color)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--format") from exc

        ctx.obj.update(
            {
                "format": normalized_format,
                "output_path": output,
                "config_path": config,
                "log_level": log_level.upper() if log_level else None,
                "no_color": no_color,
            }
        )
        configure_cli_logging(log_level or "INFO")

    register_run_command(app)
    register_series_command(app)
    return app


app = create_app()
