"""Exit codes and messages for failed CLI commands.

Exit codes:
    1  configuration error
    2  record store failure or an amount changed mid-repair
    3  job data checks found errors
    4  reconciliation or export failed
    5  a record failed validation
    6  job is not attached to the invoice
    7  referenced record not found
    130  cancelled by the user
    255  anything else
"""

import sys
import traceback
from contextlib import contextmanager
from typing import Optional, Tuple

import click
from pydantic import ValidationError

from trucking_billing.cli.utils.formatters import format_error, format_warning
from trucking_billing.services.record_store import (
    ConcurrentUpdateError,
    NotAssociatedError,
    NotFoundError,
    RecordStoreError,
)


class CLIError(Exception):
    """Failure reported to the user, optionally with a way out."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Settings or data file options are unusable."""


class DataValidationError(CLIError):
    """Raised when job data checks find errors."""


class ProcessingError(CLIError):
    """Reconciliation or export did not complete."""


_CLI_ERRORS = (
    (ConfigurationError, "Configuration Error", 1),
    (DataValidationError, "Data Validation Error", 3),
    (ProcessingError, "Processing Error", 4),
)


def _describe_store_error(error: RecordStoreError) -> Tuple[str, str, int]:
    if isinstance(error, NotAssociatedError):
        return "Not Associated", "Check the job and invoice IDs", 6
    if isinstance(error, NotFoundError):
        return "Record Not Found", f"Verify the {error.entity} ID in the record file", 7
    if isinstance(error, ConcurrentUpdateError):
        return "Amount Changed", "Another run updated this amount; run the command again", 2
    return (
        "Record Store Error",
        "Check DATA_FILE or --data-file points to a valid record file",
        2,
    )


def _echo(label: str, message: str, hint: Optional[str] = None) -> None:
    click.echo(format_error(f"{label}: {message}"))
    if hint:
        click.echo(format_warning(f"Hint: {hint}"))


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Print a failed command's error and pick its exit code.

    Args:
        error: The exception that ended the command
        debug: Print the full traceback for unexpected errors

    Returns:
        The process exit code (see the module docstring)
    """
    for error_type, label, code in _CLI_ERRORS:
        if isinstance(error, error_type):
            _echo(label, error.message, error.recovery_hint)
            return code

    if isinstance(error, RecordStoreError):
        label, hint, code = _describe_store_error(error)
        _echo(label, str(error), hint)
        return code

    if isinstance(error, ValidationError):
        _echo("Invalid Record", str(error))
        return 5

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130

    _echo("Unexpected Error", type(error).__name__)
    click.echo(str(error))
    if debug:
        click.echo("\nFull stack trace:")
        click.echo("".join(traceback.format_exception(type(error), error, error.__traceback__)))
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))
    return 255


@contextmanager
def with_error_handling(debug: bool = False):
    """
    Turn exceptions raised by a command body into a message and exit code.

    Click's own exceptions (usage errors, ``ctx.exit``) pass through so
    click reports them itself.

    Example:
        with with_error_handling(is_debug(ctx)):
            engine = get_engine(ctx)
            ...
    """
    try:
        yield
    except (click.exceptions.Exit, click.ClickException, SystemExit):
        raise
    except Exception as e:
        sys.exit(handle_cli_error(e, debug))
