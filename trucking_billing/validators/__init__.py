"""Validation layer for job amount reconciliation and job data quality."""

from trucking_billing.validators.amount_reconciler import (
    InvoiceValidationResult,
    JobAmountDetails,
    JobAmountReconciler,
    JobValidationError,
    JobValidationResult,
)
from trucking_billing.validators.diagnostics_report import (
    DiagnosticIssue,
    DiagnosticSeverity,
    DiagnosticsReport,
)
from trucking_billing.validators.job_data_validator import JobDataValidator

__all__ = [
    "JobAmountReconciler",
    "JobValidationResult",
    "JobValidationError",
    "InvoiceValidationResult",
    "JobAmountDetails",
    "JobDataValidator",
    "DiagnosticsReport",
    "DiagnosticIssue",
    "DiagnosticSeverity",
]
