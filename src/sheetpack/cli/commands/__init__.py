"""CLI command implementations for the sheetpack application.

This package contains subcommands for the sheetpack CLI, including:
- validate: Validate a job file
"""

from sheetpack.cli.commands.validate import validate_command

__all__ = ["validate_command"]
