"""Reporting package."""

from expense_tracker.reports.engine import ReportingEngine

__all__ = ["ReportingEngine"]
