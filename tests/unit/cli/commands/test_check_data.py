"""Unit tests for the check-data command."""

import json

from trucking_billing.cli import cli


def _invoke(cli_runner, engine, *args):
    return cli_runner.invoke(cli, ["check-data", *args], obj={"engine": engine})


class TestCheckDataCommand:
    """Test check-data output and exit codes."""

    def test_clean_invoice(self, cli_runner, engine):
        result = _invoke(cli_runner, engine, "INV-1")
        assert result.exit_code == 0
        assert "Errors:   0" in result.output
        assert "Info:     2" in result.output
        assert "No data problems found" in result.output
        assert "INFOS" not in result.output

    def test_info_severity_lists_drift(self, cli_runner, engine):
        result = _invoke(cli_runner, engine, "INV-1", "--severity", "info")
        assert result.exit_code == 0
        assert "INFOS (2):" in result.output
        assert "job J-2 relationship_amount" in result.output

    def test_warnings(self, cli_runner, engine):
        result = _invoke(cli_runner, engine, "INV-NODISP")
        assert result.exit_code == 0
        assert "WARNINGS (1):" in result.output
        assert "dispatcher_id" in result.output
        assert "Check completed with 1 warning(s)" in result.output

    def test_errors_exit_code(self, cli_runner, engine, store):
        store.update_job("J-1", job_type_id="JT-GONE")
        result = _invoke(cli_runner, engine, "INV-1")
        assert result.exit_code == 3
        assert "ERRORS (1):" in result.output
        assert "job J-1 job_type_id" in result.output
        assert "Data Validation Error" in result.output

    def test_checks_every_invoice_by_default(self, cli_runner, engine):
        result = _invoke(cli_runner, engine)
        assert result.exit_code == 0
        assert "Checked 3 invoice(s)" in result.output

    def test_json_output(self, cli_runner, engine):
        result = _invoke(cli_runner, engine, "INV-1", "INV-NODISP", "--json")
        assert result.exit_code == 0
        reports = json.loads(result.output)
        assert [r["invoiceId"] for r in reports] == ["INV-1", "INV-NODISP"]

    def test_unknown_invoice(self, cli_runner, engine):
        result = _invoke(cli_runner, engine, "INV-404")
        assert result.exit_code == 7
