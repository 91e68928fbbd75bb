"""
Two-Stage Input Validation

DESIGN DECISION: Input typed by the user is validated in two stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Amount and date parsing
- Characters the backing file cannot hold
- The Expense invariants themselves

STAGE 2 - SEMANTIC VALIDATION:
- Dates far in the future
- Unusually large amounts
- These are warnings: the user is asked to confirm, never blocked

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can re-enter or confirm.
"""

import datetime as dt
import re
from decimal import Decimal
from typing import Optional

from expense_tracker.codec import contains_forbidden_text, parse_amount, parse_date
from expense_tracker.config import AppSettings
from expense_tracker.models.expense import (
    Expense,
    InputValidationResult,
    RawExpenseInput,
    ValidationError,
    ValidationIssue,
)


# Commas are only accepted as thousands separators: 1,200 or 12,345.67
_GROUPED_AMOUNT = re.compile(r"[+-]?[0-9]{1,3}(,[0-9]{3})+(\.[0-9]+)?")


class ExpenseInputValidator:
    """
    Turns raw field strings into a validated Expense.

    Stage 1 errors block the entry; stage 2 only produces warnings.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        today: Optional[dt.date] = None,
    ):
        """
        Args:
            settings: Thresholds and currency symbol; defaults if None.
            today: Fixed "today" for blank dates and future checks.
                   The real current date if None.
        """
        self._settings = settings or AppSettings()
        self._today = today

    def _current_date(self) -> dt.date:
        return self._today or dt.date.today()

    def validate(self, raw: RawExpenseInput) -> InputValidationResult:
        """
        Run both stages.

        Stage 2 only runs when stage 1 produced a record.
        """
        expense, schema_issues = self._validate_schema(raw)
        schema_valid = expense is not None

        semantic_issues: list[ValidationIssue] = []
        if expense is not None:
            semantic_issues = self._validate_semantic(expense)

        return InputValidationResult(
            schema_valid=schema_valid,
            semantic_valid=not semantic_issues,
            issues=schema_issues + semantic_issues,
            expense=expense,
        )

    def _validate_schema(
        self,
        raw: RawExpenseInput,
    ) -> tuple[Optional[Expense], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (expense_or_None, list_of_issues)
        """
        issues = []

        for field in ("category", "payee"):
            value = getattr(raw, field).strip()
            if not value:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field.capitalize()} is required",
                    severity="error",
                ))
            elif contains_forbidden_text(value):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_format",
                    message=f"{field.capitalize()} cannot contain commas",
                    severity="error",
                    suggested_fix="Use a dash or slash instead of the comma",
                ))

        amount = self._parse_amount(raw.amount, issues)
        expense_date = self._parse_date(raw.date, issues)

        if issues:
            return None, issues

        try:
            expense = Expense.create(
                category=raw.category,
                payee=raw.payee,
                amount=amount,
                date=expense_date,
            )
        except ValidationError as e:
            for field in e.fields or ["expense"]:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_value",
                    message=str(e),
                    severity="error",
                ))
            return None, issues

        return expense, issues

    def _parse_amount(
        self,
        text: str,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        cleaned = text.strip()
        symbol = self._settings.currency_symbol
        if symbol and cleaned.startswith(symbol):
            cleaned = cleaned[len(symbol):].strip()

        if "," in cleaned:
            if not _GROUPED_AMOUNT.fullmatch(cleaned):
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_format",
                    message=f"Amount '{text.strip()}' uses a comma that is not a thousands separator",
                    severity="error",
                    suggested_fix="Use a '.' as the decimal point, e.g. 7.13",
                ))
                return None
            cleaned = cleaned.replace(",", "")

        if not cleaned:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
            return None

        try:
            amount = parse_amount(cleaned)
        except ValueError:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount '{text.strip()}' is not a number",
                severity="error",
                suggested_fix="Enter digits with an optional decimal point, e.g. 12.50",
            ))
            return None

        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))
            return None

        return amount

    def _parse_date(
        self,
        text: str,
        issues: list[ValidationIssue],
    ) -> Optional[dt.date]:
        cleaned = text.strip()
        if not cleaned:
            return self._current_date()

        try:
            return parse_date(cleaned)
        except ValueError:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Date '{cleaned}' is not a valid YYYY-MM-DD date",
                severity="error",
                suggested_fix="Leave blank for today",
            ))
            return None

    def _validate_semantic(self, expense: Expense) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Checks:
        - Future dates (with tolerance)
        - Absurd amounts
        """
        issues = []

        max_future_date = self._current_date() + dt.timedelta(
            days=self._settings.future_date_tolerance_days
        )
        if expense.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({expense.date.isoformat()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        max_amount = Decimal(str(self._settings.max_expense_amount))
        if expense.amount > max_amount:
            symbol = self._settings.currency_symbol
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({symbol}{expense.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return issues
