"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a flat text file as the backend, but designed to be swappable.
"""

from expense_tracker.services.storage.interface import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    StorageError,
    StorageIOError,
)
from expense_tracker.services.storage.flat_file import FlatFileExpenseStore
from expense_tracker.services.storage.memory import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ExpenseStorageInterface",
    # Exceptions
    "StorageError",
    "StorageIOError",
    # Implementations
    "FlatFileExpenseStore",
    "InMemoryAuditStorage",
]
