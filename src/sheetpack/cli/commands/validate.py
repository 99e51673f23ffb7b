"""Validate command for checking packing job files.

This module provides the `validate` command that checks a JSON job file
for syntax and schema errors without running the packer.
"""

from pathlib import Path
from typing import Annotated

import typer

from sheetpack.application.config import ConfigError, load_job


def _display_load_error(error: ConfigError) -> None:
    """Display a job loading error on stderr."""
    typer.echo("Errors:", err=True)
    if error.error_type == "file_not_found":
        typer.echo(f"  File not found: {error.path}", err=True)
    elif error.error_type == "json_parse":
        typer.echo("  Invalid JSON syntax", err=True)
        for detail in error.details:
            line = detail.get("line", "?")
            column = detail.get("column", "?")
            message = detail.get("message", "Unknown error")
            typer.echo(f"    Line {line}, Column {column}: {message}", err=True)
    elif error.error_type == "validation" and error.details:
        for detail in error.details:
            path = detail.get("path") or "(root)"
            message = detail.get("message", "Unknown error")
            typer.echo(f"  {path}: {message}", err=True)
            value = detail.get("value")
            if value is not None and not isinstance(value, (dict, list)):
                typer.echo(f"    Value: {value!r}", err=True)
    else:
        typer.echo(f"  {error.message}", err=True)

    typer.echo("Validation failed.", err=True)


def validate_command(
    job_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON job file to validate"),
    ],
) -> None:
    """Validate a packing job file.

    Exit codes:
        0 - Job file is valid
        1 - Job file has errors

    Example:
        sheetpack validate kitchen.json
    """
    typer.echo(f"Validating {job_file}...")

    try:
        job = load_job(job_file)
    except ConfigError as e:
        _display_load_error(e)
        raise typer.Exit(code=1)

    nb_boxes = sum(box.quantity for box in job.boxes)
    nb_bins = sum(bin_spec.quantity for bin_spec in job.bins)
    typer.echo(f"  {nb_boxes} box(es), {nb_bins} offcut(s)")
    if job.options.base_length > 0:
        typer.echo(
            f"  Standard sheet: {job.options.base_length:g} x {job.options.base_width:g}"
        )
    typer.echo("Validation passed. Job file is valid.")
