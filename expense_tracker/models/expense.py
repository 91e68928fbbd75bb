"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the record invariants at construction time
2. Provide clear validation error messages
3. Be immutable once built, so a stored record can never drift

DESIGN DECISION: Amounts are decimal.Decimal end to end.
Repeated sums over binary floats drift; Decimal sums are exact.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
)


class ValidationError(ValueError):
    """
    An Expense could not be built because a field breaks an invariant.

    `fields` names every offending field so callers can re-prompt
    for just those values.
    """

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = fields or []


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class StoreOperation(str, Enum):
    """Operations a store reports outcomes for."""
    LOAD = "load"
    SAVE = "save"
    ADD = "add"


class StoreErrorKind(str, Enum):
    """
    Why a store operation failed.

    VALIDATION: the record broke a model invariant
    FORMAT: a line did not decode, or a record cannot be encoded
    IO: the backing file could not be read or written
    """
    VALIDATION = "validation"
    FORMAT = "format"
    IO = "io"


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    One recorded outflow.

    Records have no identity field: two entries with the same four
    values are both kept and differ only by their position in the store.
    Instances are frozen; build them with Expense.create().
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    category: str = Field(
        ...,
        min_length=1,
        description="Free-form category label"
    )
    payee: str = Field(
        ...,
        min_length=1,
        description="Who was paid"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount paid, strictly positive"
    )
    date: dt.date = Field(
        default_factory=dt.date.today,
        description="Day the expense happened"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        """Route floats through their string form so 7.13 stays 7.13."""
        if isinstance(v, bool):
            raise ValueError("Amount must be a number, not a boolean")
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @classmethod
    def create(
        cls,
        category: str,
        payee: str,
        amount: Any,
        date: Optional[dt.date] = None,
    ) -> "Expense":
        """
        Build a validated Expense.

        Raises:
            ValidationError: if category or payee is blank, amount is not
                a strictly positive number, or date is not a valid date.
        """
        data: dict[str, Any] = {
            "category": category,
            "payee": payee,
            "amount": amount,
        }
        if date is not None:
            data["date"] = date

        try:
            return cls(**data)
        except PydanticValidationError as e:
            errors = e.errors()
            fields = [".".join(str(part) for part in err["loc"]) for err in errors]
            details = "; ".join(
                f"{field}: {err['msg']}" for field, err in zip(fields, errors)
            )
            raise ValidationError(f"Invalid expense: {details}", fields=fields) from e


# =============================================================================
# STORE OUTCOMES
# =============================================================================

class StoreResult(BaseModel):
    """
    Outcome of one store operation.

    The store never raises for I/O or format problems; it returns one of
    these instead, so every failure is visible to the caller.
    """

    operation: StoreOperation
    success: bool
    data_found: bool = Field(
        default=True,
        description="For load: did a backing file exist?"
    )
    record_count: int = Field(
        default=0,
        ge=0,
        description="Records held in memory after the operation"
    )
    error_kind: Optional[StoreErrorKind] = None
    error_message: Optional[str] = None
    line_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="Offending line for format failures during load"
    )

    @property
    def message(self) -> str:
        """Short human-readable description of the outcome."""
        if not self.success:
            return f"{self.operation.value} failed: {self.error_message}"
        if self.operation == StoreOperation.LOAD and not self.data_found:
            return "No prior data found, starting with an empty ledger"
        if self.operation == StoreOperation.LOAD:
            return f"Loaded {self.record_count} expense(s)"
        if self.operation == StoreOperation.ADD:
            return f"Expense saved ({self.record_count} total)"
        return f"Saved {self.record_count} expense(s)"


# =============================================================================
# REPORT MODELS
# =============================================================================

class GroupTotal(BaseModel):
    """One row of a grouped report."""
    model_config = ConfigDict(frozen=True)

    key: str
    total: Decimal
    count: int = Field(ge=1)


class ExpenseSummary(BaseModel):
    """Overall picture of a set of expenses."""

    record_count: int = Field(ge=0)
    total_amount: Decimal
    first_date: Optional[dt.date] = None
    last_date: Optional[dt.date] = None
    by_payee: list[GroupTotal] = Field(default_factory=list)
    by_category: list[GroupTotal] = Field(default_factory=list)


# =============================================================================
# INPUT VALIDATION MODELS
# =============================================================================

class RawExpenseInput(BaseModel):
    """Field values exactly as typed by the user."""

    category: str = ""
    payee: str = ""
    amount: str = ""
    date: str = Field(
        default="",
        description="YYYY-MM-DD, or blank for today"
    )


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class InputValidationResult(BaseModel):
    """
    Result of the two-stage input validation.

    Stage 1: Schema validation (presence, parsing, invariants)
    Stage 2: Semantic validation (suspicious but allowed values)
    """

    schema_valid: bool
    semantic_valid: bool = Field(
        ...,
        description="False when stage 2 raised warnings that need confirmation"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)
    expense: Optional[Expense] = Field(
        default=None,
        description="The built record, present only when there are no errors"
    )

    @property
    def is_valid(self) -> bool:
        return self.expense is not None and not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(issue.severity == "warning" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
