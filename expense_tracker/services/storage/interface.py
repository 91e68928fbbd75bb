"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the flat file for another backend later
2. Keep the shell and reports decoupled from file handling

The interface is intentionally simple - just the operations the
ledger needs. There is no update or delete: the only destructive
operation is rewriting the whole persisted set.

Every operation returns a StoreResult instead of raising for I/O or
format problems, so no failure can go unnoticed by the caller.
"""

import datetime as dt
from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.expense import Expense, StoreResult


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for the expense store.

    The store is the sole owner of the in-memory, insertion-ordered
    list of expenses. Callers only ever see immutable snapshots.
    """

    @abstractmethod
    def load(self) -> StoreResult:
        """
        Replace the in-memory records with the persisted ones.

        A missing backing file is not an error: the store starts empty
        and reports data_found=False. Any unreadable or undecodable
        content leaves the store empty and reports failure.
        """
        pass

    @abstractmethod
    def save(self, correlation_id: Optional[UUID] = None) -> StoreResult:
        """
        Persist every in-memory record, replacing the backing file.
        """
        pass

    @abstractmethod
    def add(
        self,
        expense: Expense,
        correlation_id: Optional[UUID] = None,
    ) -> StoreResult:
        """
        Append a record and immediately persist the full sequence.

        correlation_id, when given, is attached to the add and save
        audit events of this record.

        Returns:
            Failure with error_kind FORMAT if the record cannot be
            stored (nothing is appended), or IO if it was appended but
            could not be written yet.
        """
        pass

    @abstractmethod
    def all(self) -> tuple[Expense, ...]:
        """
        Read-only snapshot of the records in insertion order.
        """
        pass

    def add_expense(
        self,
        category: str,
        payee: str,
        amount: Any,
        date: Optional[dt.date] = None,
    ) -> StoreResult:
        """
        Build an Expense from raw fields and add it.

        Raises:
            ValidationError: if the fields break an Expense invariant.
                Nothing is added in that case.
        """
        expense = Expense.create(
            category=category,
            payee=payee,
            amount=amount,
            date=date,
        )
        return self.add(expense)


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageIOError(StorageError):
    """The backing file could not be read or written."""
    pass
