"""Unit tests for CLI main entry point."""

import pytest
from click.testing import CliRunner

from trucking_billing import __version__
from trucking_billing.cli import cli


class TestCLIMain:
    """Test suite for CLI main entry point."""

    @pytest.fixture
    def runner(self):
        """Create a Click CLI test runner."""
        return CliRunner()

    def test_cli_group_exists(self, runner):
        """Test that CLI group exists and can be invoked."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage:" in result.output

    def test_cli_help_text(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert "Trucking Billing CLI" in result.output
        assert "Commands:" in result.output
        assert "--data-file" in result.output

    def test_cli_version_flag(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.parametrize(
        "command",
        ["job-amount", "invoice-totals", "validate-amounts", "check-data", "export-breakdown"],
    )
    def test_cli_has_command(self, runner, command):
        result = runner.invoke(cli, ["--help"])
        assert command in result.output

    def test_unknown_command_shows_error(self, runner):
        """Test that unknown commands show helpful error."""
        result = runner.invoke(cli, ["unknown-command"])
        assert result.exit_code != 0
        assert "No such command" in result.output or "Error" in result.output

    def test_missing_data_file_exit_code(self, cli_runner, tmp_path):
        missing = tmp_path / "missing.json"
        result = cli_runner.invoke(cli, ["--data-file", str(missing), "job-amount", "J-1"])
        assert result.exit_code == 2
        assert "Record Store Error" in result.output
