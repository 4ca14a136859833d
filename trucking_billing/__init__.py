"""Trucking billing: job amount calculation and invoice reconciliation."""

__version__ = "1.0.0"
