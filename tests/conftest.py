"""Shared fixtures for the Expense Tracker tests."""

from datetime import date
from decimal import Decimal

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.models.expense import Expense
from expense_tracker.services.storage import FlatFileExpenseStore, InMemoryAuditStorage


@pytest.fixture
def data_file(tmp_path):
    """Path of a backing file that does not exist yet."""
    return tmp_path / "expenses.csv"


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage(max_events=50)


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def store(data_file, audit_logger):
    """A store over a missing file, with instant retries."""
    return FlatFileExpenseStore(
        data_file,
        retry_attempts=2,
        retry_wait_seconds=0,
        audit_logger=audit_logger,
    )


@pytest.fixture
def sample_expenses():
    """Five expenses entered out of date order, with repeated payees."""
    return [
        Expense.create("Food", "Market", Decimal("7.13"), date(2024, 3, 1)),
        Expense.create("Rent", "Landlord", Decimal("1200.00"), date(2024, 3, 1)),
        Expense.create("Food", "Cafe", Decimal("3.50"), date(2024, 1, 5)),
        Expense.create("Transport", "Metro", Decimal("2.40"), date(2024, 2, 14)),
        Expense.create("Food", "Market", Decimal("12.87"), date(2024, 3, 20)),
    ]
