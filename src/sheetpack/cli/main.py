"""Typer CLI for sheet cutting optimization."""

import logging
from pathlib import Path
from typing import Annotated

import typer

from sheetpack.application import PackJobCommand
from sheetpack.application.config import ConfigError, load_job
from sheetpack.cli.commands import validate_command
from sheetpack.domain import Optimization, Stacking
from sheetpack.infrastructure import CutListFormatter, JsonExporter, PackingReportFormatter

OUTPUT_FORMATS = ("text", "json", "cuts")

app = typer.Typer(
    name="sheetpack",
    help="Pack rectangular pieces onto sheets with guillotine cuts.",
)

# Register validate command
app.command(name="validate")(validate_command)


def _configure_logging(verbose: bool, debug: bool) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def pack(
    job_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON job file"),
    ],
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text, json, cuts"),
    ] = "text",
    optimization: Annotated[
        Optimization | None,
        typer.Option("--optimization", help="Search effort, overrides the job file"),
    ] = None,
    stacking: Annotated[
        Stacking | None,
        typer.Option("--stacking", help="Preferred stacking, overrides the job file"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Time budget in seconds, overrides the job file"),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log ranking tables while searching"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log progress to stderr"),
    ] = False,
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the result to a file instead of stdout"),
    ] = None,
) -> None:
    """Pack the boxes of a job file into its bins.

    Examples:
        sheetpack pack kitchen.json
        sheetpack pack kitchen.json --format json --output kitchen-result.json
        sheetpack pack kitchen.json --optimization advanced --stacking length
    """
    if output_format not in OUTPUT_FORMATS:
        typer.echo(f"Unknown format: {output_format}", err=True)
        typer.echo(f"Available formats: {', '.join(OUTPUT_FORMATS)}", err=True)
        raise typer.Exit(code=1)
    if timeout is not None and timeout <= 0:
        typer.echo("Error: --timeout must be positive", err=True)
        raise typer.Exit(code=1)

    _configure_logging(verbose, debug)

    try:
        job = load_job(job_file)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    command = PackJobCommand()
    result = command.execute(
        job,
        optimization=optimization,
        stacking=stacking,
        timeout=timeout,
        debug=True if debug else None,
    )

    if output_format == "json":
        text = JsonExporter().export(result)
    elif result.is_valid and output_format == "cuts":
        text = CutListFormatter().format(result.outcome.result)
    else:
        text = PackingReportFormatter().format(result)

    if output_file is not None:
        output_file.write_text(text, encoding="utf-8")
        typer.echo(f"Result written to {output_file}")
    else:
        typer.echo(text)

    for warning in result.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    if not result.is_valid:
        for error in result.errors:
            typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
