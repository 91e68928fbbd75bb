"""Services package."""

from expense_tracker.services.storage import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    FlatFileExpenseStore,
    InMemoryAuditStorage,
    StorageError,
    StorageIOError,
)

__all__ = [
    "AuditStorageInterface",
    "ExpenseStorageInterface",
    "FlatFileExpenseStore",
    "InMemoryAuditStorage",
    "StorageError",
    "StorageIOError",
]
