"""
CLI Error Handling
==================

Maps exceptions to consistent messages and exit codes.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for the CLI."""
    SUCCESS = 0
    BUILD_ERROR = 1      # At least one source failed to compile
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def exit_code_for(error: Exception) -> ExitCode:
    """Return the exit code an exception maps to."""
    from quadc.errors import InternalCompilerError, QuadCompilationError, QuadError

    if isinstance(error, QuadCompilationError):
        if any(isinstance(d, InternalCompilerError) for d in error.diagnostics):
            return ExitCode.INTERNAL_ERROR
        return ExitCode.BUILD_ERROR
    if isinstance(error, InternalCompilerError):
        return ExitCode.INTERNAL_ERROR
    if isinstance(error, QuadError):
        return ExitCode.BUILD_ERROR
    if isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError,
                          UnicodeDecodeError)):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception and exit with the matching exit code.

    Compiler diagnostics are already formatted and printed as they are.
    Internal errors print a traceback in verbose mode.

    Raises:
        SystemExit: Always
    """
    from quadc.errors import QuadError

    code = exit_code_for(error)

    if isinstance(error, QuadError):
        click.echo(str(error), err=True)
    elif code is ExitCode.INVALID_ARGS:
        click.echo(f"Error: {error}", err=True)
    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    sys.exit(code)
