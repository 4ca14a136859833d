"""Unit tests for CLI error handling."""

import click
import pytest
from pydantic import BaseModel, ValidationError

from trucking_billing.cli.error_handlers import (
    ConfigurationError,
    DataValidationError,
    ProcessingError,
    handle_cli_error,
    with_error_handling,
)
from trucking_billing.services.record_store import (
    ConcurrentUpdateError,
    MissingDispatcherError,
    NotAssociatedError,
    NotFoundError,
    RecordStoreError,
)


class _Strict(BaseModel):
    count: int


def _validation_error() -> ValidationError:
    try:
        _Strict(count="many")
    except ValidationError as e:
        return e
    raise AssertionError("expected a ValidationError")


class TestHandleCliError:
    """Test exit codes and messages per error type."""

    @pytest.mark.parametrize(
        "error,exit_code",
        [
            (ConfigurationError("bad config"), 1),
            (RecordStoreError("disk gone"), 2),
            (ConcurrentUpdateError("J-2", "INV-1", None, None), 2),
            (DataValidationError("bad data"), 3),
            (ProcessingError("failed"), 4),
            (NotAssociatedError("J-1", "INV-2"), 6),
            (NotFoundError("job", "J-9"), 7),
            (MissingDispatcherError("INV-1"), 7),
            (click.Abort(), 130),
            (RuntimeError("boom"), 255),
        ],
    )
    def test_exit_codes(self, error, exit_code):
        assert handle_cli_error(error) == exit_code

    def test_validation_error_exit_code(self):
        assert handle_cli_error(_validation_error()) == 5

    def test_recovery_hint_printed(self, capsys):
        handle_cli_error(ProcessingError("failed", recovery_hint="Run check-data"))
        out = capsys.readouterr().out
        assert "Processing Error: failed" in out
        assert "Hint: Run check-data" in out

    def test_not_found_hint_names_entity(self, capsys):
        handle_cli_error(NotFoundError("invoice", "INV-9"))
        out = capsys.readouterr().out
        assert "invoice not found: INV-9" in out
        assert "Verify the invoice ID" in out

    def test_amount_changed_suggests_rerun(self, capsys):
        handle_cli_error(ConcurrentUpdateError("J-2", "INV-1", None, None))
        out = capsys.readouterr().out
        assert "Amount Changed:" in out
        assert "run the command again" in out

    def test_unexpected_error_without_debug(self, capsys):
        handle_cli_error(RuntimeError("boom"))
        out = capsys.readouterr().out
        assert "Unexpected Error: RuntimeError" in out
        assert "--debug" in out

    def test_unexpected_error_with_debug(self, capsys):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            handle_cli_error(e, debug=True)
        assert "Full stack trace" in capsys.readouterr().out


class TestWithErrorHandling:
    """Test the error handling context manager."""

    def test_no_error(self):
        with with_error_handling():
            value = 1
        assert value == 1

    def test_error_exits_with_code(self):
        with pytest.raises(SystemExit) as exc_info:
            with with_error_handling():
                raise NotFoundError("job", "J-9")
        assert exc_info.value.code == 7

    def test_click_exceptions_pass_through(self):
        with pytest.raises(click.UsageError):
            with with_error_handling():
                raise click.UsageError("wrong arguments")
