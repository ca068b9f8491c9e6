"""Bulk GitHub repository settings reconciliation."""

__version__ = "0.1.0"
