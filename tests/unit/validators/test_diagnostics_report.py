"""Unit tests for the diagnostics report."""

from trucking_billing.validators import DiagnosticIssue, DiagnosticSeverity, DiagnosticsReport


class TestDiagnosticIssue:
    """Test DiagnosticIssue formatting."""

    def test_str_with_job(self):
        issue = DiagnosticIssue(DiagnosticSeverity.WARNING, "J-1", "load_count", "Missing")
        assert str(issue) == "[WARNING] job J-1 load_count: Missing"

    def test_str_without_job(self):
        issue = DiagnosticIssue(DiagnosticSeverity.ERROR, None, "dispatcher_id", "Missing")
        assert str(issue) == "[ERROR] dispatcher_id: Missing"

    def test_to_dict(self):
        issue = DiagnosticIssue(DiagnosticSeverity.INFO, "J-1", "weight", "Odd", 12)
        assert issue.to_dict() == {
            "severity": "INFO",
            "jobId": "J-1",
            "field": "weight",
            "message": "Odd",
            "value": "12",
        }


class TestDiagnosticsReport:
    """Test DiagnosticsReport counting and formatting."""

    def test_empty_report(self):
        report = DiagnosticsReport("INV-1")
        assert report.is_clean()
        assert report.summary() == "No issues found"
        assert report.format() == "Invoice INV-1 - no issues found"

    def test_counts(self):
        report = DiagnosticsReport()
        report.add_error("J-1", "job_id", "Missing job")
        report.add_warning("J-2", "weight", "No weights")
        report.add_warning("J-3", "rate", "No rate")
        report.add_info("J-4", "relationship_amount", "Drift")

        assert report.error_count == 1
        assert report.warning_count == 2
        assert report.info_count == 1
        assert not report.is_clean()
        assert report.summary() == "1 error(s), 2 warning(s), 1 info message(s)"

    def test_info_only_is_clean(self):
        report = DiagnosticsReport()
        report.add_info("J-1", "relationship_amount", "Drift")
        assert report.is_clean()

    def test_merge_and_job_issues(self):
        first = DiagnosticsReport()
        first.add_warning("J-1", "load_count", "Missing")
        second = DiagnosticsReport()
        second.add_error("J-2", "job_type_id", "Missing")
        first.merge(second)

        assert len(first.issues) == 2
        assert len(first.get_job_issues("J-2")) == 1

    def test_format_groups_by_severity(self):
        report = DiagnosticsReport("INV-1")
        report.add_info("J-1", "relationship_amount", "Drift")
        report.add_error("J-2", "job_id", "Missing job")
        text = report.format()

        assert text.index("ERRORS:") < text.index("INFO:")
        assert "WARNINGS:" not in text
