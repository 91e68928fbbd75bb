"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Expense entry (raw fields → validate → confirm warnings → add → save)
2. Reports (store snapshot → reporting engine → report rows)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing validation
- Warnings are only accepted with explicit confirmation
- Reports only ever see a snapshot, never the store's list
- Every step is audited
"""

from typing import Callable, Optional

from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import Settings, get_settings
from expense_tracker.models.expense import (
    Expense,
    ExpenseSummary,
    GroupTotal,
    InputValidationResult,
    RawExpenseInput,
    StoreResult,
)
from expense_tracker.reports import ReportingEngine
from expense_tracker.services.storage import (
    ExpenseStorageInterface,
    FlatFileExpenseStore,
    InMemoryAuditStorage,
)
from expense_tracker.validation import ExpenseInputValidator


WarningConfirmer = Callable[[InputValidationResult], bool]


class ExpenseEntryFlow:
    """
    Orchestrates recording one expense.

    Flow:
    1. Validate → Two-stage validation of the raw fields
    2. Confirm → If there are warnings, ask the caller
    3. Add → Store appends and rewrites the backing file
    """

    def __init__(
        self,
        store: ExpenseStorageInterface,
        validator: Optional[ExpenseInputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or ExpenseInputValidator()
        self._audit_logger = audit_logger

    def submit(
        self,
        raw: RawExpenseInput,
        confirm_warnings: Optional[WarningConfirmer] = None,
    ) -> tuple[InputValidationResult, Optional[StoreResult]]:
        """
        Validate and record one expense.

        Args:
            raw: Field values as typed.
            confirm_warnings: Called when validation produced only warnings;
                returning False abandons the entry. Without a callback,
                warnings are accepted.

        Returns:
            (validation_result, store_result). store_result is None when
            nothing was sent to the store (errors, or warnings declined).
        """
        correlation_id = create_correlation_id()
        result = self._validator.validate(raw)

        if not result.is_valid:
            if self._audit_logger:
                self._audit_logger.log_validation_failed(
                    issues=[issue.model_dump() for issue in result.issues],
                    correlation_id=correlation_id,
                )
            return result, None

        if result.has_warnings and confirm_warnings is not None:
            if not confirm_warnings(result):
                return result, None

        return result, self._store.add(result.expense, correlation_id=correlation_id)


class ReportFlow:
    """
    Orchestrates report generation over the store's current records.

    Each report takes a fresh snapshot, so it reflects every add made so far.
    """

    def __init__(
        self,
        store: ExpenseStorageInterface,
        engine: Optional[ReportingEngine] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._engine = engine or ReportingEngine()
        self._audit_logger = audit_logger

    def listing(self) -> list[Expense]:
        """All expenses, most recent first."""
        rows = self._engine.list_descending_by_date(self._store.all())
        self._audited("listing", len(rows))
        return rows

    def totals_by_payee(self) -> list[GroupTotal]:
        rows = self._engine.group_by_payee(self._store.all())
        self._audited("by_payee", len(rows))
        return rows

    def totals_by_category(self) -> list[GroupTotal]:
        rows = self._engine.group_by_category(self._store.all())
        self._audited("by_category", len(rows))
        return rows

    def totals_by_month(self) -> list[GroupTotal]:
        rows = self._engine.group_by_month(self._store.all())
        self._audited("by_month", len(rows))
        return rows

    def summary(self) -> ExpenseSummary:
        summary = self._engine.summarize(self._store.all())
        self._audited("summary", summary.record_count)
        return summary

    def _audited(self, report_type: str, row_count: int) -> None:
        if self._audit_logger:
            self._audit_logger.log_report_generated(
                report_type=report_type,
                row_count=row_count,
            )


def create_app_components(
    settings: Optional[Settings] = None,
) -> tuple[FlatFileExpenseStore, ExpenseEntryFlow, ReportFlow, AuditLogger]:
    """
    Factory function to create all application components.

    The store is returned unloaded; call store.load() before use.

    Returns:
        (store, entry_flow, report_flow, audit_logger)
    """
    settings = settings or get_settings()
    app_settings = settings.app

    audit_logger = AuditLogger(
        InMemoryAuditStorage(max_events=app_settings.recent_activity_limit)
    )
    store = FlatFileExpenseStore.from_settings(settings.storage, audit_logger=audit_logger)

    entry_flow = ExpenseEntryFlow(
        store=store,
        validator=ExpenseInputValidator(app_settings),
        audit_logger=audit_logger,
    )
    report_flow = ReportFlow(
        store=store,
        audit_logger=audit_logger,
    )

    return store, entry_flow, report_flow, audit_logger
