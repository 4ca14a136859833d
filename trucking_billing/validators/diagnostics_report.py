"""Diagnostics report for collecting and formatting job data issues."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(IntEnum):
    """Severity levels for job data issues."""

    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class DiagnosticIssue:
    """A single problem found in a job's billing data.

    Attributes:
        severity: How badly the issue affects the job amount
        job_id: Job the issue belongs to (None for invoice-level issues)
        field: The job or rate card field that has the issue
        message: Human-readable description of the issue
        value: The offending raw value
    """

    severity: DiagnosticSeverity
    job_id: Optional[str]
    field: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        where = f"job {self.job_id} " if self.job_id else ""
        return f"[{self.severity.name}] {where}{self.field}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.name,
            "jobId": self.job_id,
            "field": self.field,
            "message": self.message,
            "value": None if self.value is None else str(self.value),
        }


class DiagnosticsReport:
    """Collects the job data issues found on an invoice.

    Errors mark jobs that cannot be priced at all, warnings mark jobs whose
    amount was produced by a fallback path, info marks drift that the
    reconciler will repair.

    Example:
        >>> report = DiagnosticsReport("INV-1")
        >>> report.add_warning("J-1", "start_time", "Hourly job has no start time")
        >>> report.summary()
        '1 warning(s)'
    """

    def __init__(self, invoice_id: Optional[str] = None) -> None:
        self.invoice_id = invoice_id
        self.issues: List[DiagnosticIssue] = []

    def _count(self, severity: DiagnosticSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def error_count(self) -> int:
        return self._count(DiagnosticSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self._count(DiagnosticSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return self._count(DiagnosticSeverity.INFO)

    def is_clean(self) -> bool:
        """True when no errors or warnings were found.

        Info-level drift does not count, since reconciliation repairs it.
        """
        return self.error_count == 0 and self.warning_count == 0

    def add(
        self,
        severity: DiagnosticSeverity,
        job_id: Optional[str],
        field: str,
        message: str,
        value: Any = None,
    ) -> None:
        self.issues.append(
            DiagnosticIssue(
                severity=severity,
                job_id=job_id,
                field=field,
                message=message,
                value=value,
            )
        )

    def add_error(self, job_id: Optional[str], field: str, message: str, value: Any = None) -> None:
        self.add(DiagnosticSeverity.ERROR, job_id, field, message, value)

    def add_warning(self, job_id: Optional[str], field: str, message: str, value: Any = None) -> None:
        self.add(DiagnosticSeverity.WARNING, job_id, field, message, value)

    def add_info(self, job_id: Optional[str], field: str, message: str, value: Any = None) -> None:
        self.add(DiagnosticSeverity.INFO, job_id, field, message, value)

    def get_issues(self, severity: DiagnosticSeverity) -> List[DiagnosticIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    def get_job_issues(self, job_id: str) -> List[DiagnosticIssue]:
        return [issue for issue in self.issues if issue.job_id == job_id]

    def merge(self, other: "DiagnosticsReport") -> None:
        """Append the issues of another report to this one."""
        self.issues.extend(other.issues)

    def summary(self) -> str:
        """Get a summary of the report.

        Returns:
            Summary string with counts of errors, warnings and info messages
        """
        parts = []
        if self.error_count > 0:
            parts.append(f"{self.error_count} error(s)")
        if self.warning_count > 0:
            parts.append(f"{self.warning_count} warning(s)")
        if self.info_count > 0:
            parts.append(f"{self.info_count} info message(s)")

        if not parts:
            return "No issues found"

        return ", ".join(parts)

    def format(self) -> str:
        """Format the report for display, grouped by severity."""
        title = f"Invoice {self.invoice_id}" if self.invoice_id else "Job data"
        if not self.issues:
            return f"{title} - no issues found"

        lines = [f"{title} - {self.summary()}", "=" * 60]

        for severity, heading in (
            (DiagnosticSeverity.ERROR, "ERRORS"),
            (DiagnosticSeverity.WARNING, "WARNINGS"),
            (DiagnosticSeverity.INFO, "INFO"),
        ):
            issues = self.get_issues(severity)
            if issues:
                lines.append(f"\n{heading}:")
                for issue in issues:
                    lines.append(f"  - {issue}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "infoCount": self.info_count,
            "issues": [issue.to_dict() for issue in self.issues],
        }
