"""
cdump Error Reporting
=====================

Turns exceptions escaping the cdump command into one message on stderr and
a process exit status. Scripts can tell bad C input apart from a bad
command line by the status alone:

    0   declarations printed
    1   the input failed to lex, preprocess or parse
    2   bad option value, or the file could not be read
    3   a bug in cdeclkit (traceback with -v)

Front end errors are printed as they format themselves, so the first line
stays in the `file:line:col: error:` shape editors understand.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from cdeclkit.cparse.errors import CFrontendError
from cdeclkit.errors import CDeclError


class ExitCode(IntEnum):
    """Process exit status of cdump."""
    SUCCESS = 0
    INPUT_ERROR = 1
    INVALID_ARGS = 2
    INTERNAL_ERROR = 3


# Failures reading the input file count as usage errors, not input errors
_UNREADABLE_INPUT = (FileNotFoundError, PermissionError, IsADirectoryError, UnicodeDecodeError)


def exit_code_for(error: Exception) -> ExitCode:
    """Classify an exception escaping the cdump command."""
    if isinstance(error, CDeclError):
        return ExitCode.INPUT_ERROR
    if isinstance(error, (click.BadParameter, *_UNREADABLE_INPUT)):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an error from cdump and exit.

    Args:
        error: The exception that stopped the command
        verbose: Print the traceback of internal errors

    Raises:
        SystemExit: Always, with the status from exit_code_for()
    """
    code = exit_code_for(error)

    if isinstance(error, CFrontendError):
        click.echo(str(error), err=True)
    elif code == ExitCode.INTERNAL_ERROR:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exception(type(error), error, error.__traceback__)
    else:
        click.echo(f"Error: {error}", err=True)

    sys.exit(code)
