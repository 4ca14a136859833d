"""Shared utilities."""

from trucking_billing.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    get_correlation_id,
    get_log_context,
    log_function_call,
)

__all__ = [
    "LogContext",
    "generate_correlation_id",
    "get_correlation_id",
    "get_log_context",
    "log_function_call",
]
