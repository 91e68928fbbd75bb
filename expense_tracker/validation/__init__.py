"""Input validation package."""

from expense_tracker.validation.validator import ExpenseInputValidator

__all__ = ["ExpenseInputValidator"]
