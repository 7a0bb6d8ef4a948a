"""
CLI Error Handling
==================

Provides consistent error reporting and exit codes for the CLI.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for the CLI."""
    SUCCESS = 0
    PREPROCESS_ERROR = 1  # Malformed input, undefined variables, ...
    INVALID_ARGS = 2      # Invalid arguments or missing files
    INTERNAL_ERROR = 3    # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception raised while running the CLI and exit.

    Preprocessing errors are already formatted with their location, so
    they are printed as-is. Caller errors exit with INVALID_ARGS, anything
    else is an internal error (with a traceback in verbose mode).

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from linepp.errors import InvalidArgumentError, PreprocessError

    if isinstance(error, InvalidArgumentError):
        click.echo(f"Error: {error.message}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, PreprocessError):
        click.echo(str(error), err=True)
        sys.exit(ExitCode.PREPROCESS_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError, UnicodeDecodeError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
