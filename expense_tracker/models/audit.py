"""
Audit Models for Expense Tracker

Every store and report operation produces an audit event.
This provides:
1. Traceability of what was written to the backing file and when
2. Debugging information when a load or save goes wrong
3. A "recent activity" view for the user

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Loading
    STORE_LOADED = "store_loaded"
    NO_PRIOR_DATA = "no_prior_data"
    STORE_LOAD_FAILED = "store_load_failed"

    # Recording
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REJECTED = "expense_rejected"

    # Persistence
    STORE_SAVED = "store_saved"
    STORE_SAVE_FAILED = "store_save_failed"

    # Reporting
    REPORT_GENERATED = "report_generated"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., validate, add and save of one entry)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    @field_validator("description", mode="before")
    @classmethod
    def clip_description(cls, v: Any) -> Any:
        """Long payees or error messages must not make the event itself invalid."""
        if isinstance(v, str) and len(v) > 500:
            return v[:497] + "..."
        return v

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.store_loaded(path, record_count)
        event = AuditEventBuilder.expense_added(payee, amount, correlation_id)
    """

    @staticmethod
    def store_loaded(path: str, record_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOADED,
            description=f"Loaded {record_count} expense(s) from {path}",
            details={
                "path": path,
                "record_count": record_count,
            },
        )

    @staticmethod
    def no_prior_data(path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NO_PRIOR_DATA,
            description=f"No backing file at {path}, starting empty",
            details={"path": path},
        )

    @staticmethod
    def store_load_failed(
        path: str,
        error_kind: str,
        error_message: str,
        line_number: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Load of {path} failed ({error_kind}), ledger reset to empty",
            error_message=error_message,
            details={
                "path": path,
                "error_kind": error_kind,
                "line_number": line_number,
            },
        )

    @staticmethod
    def expense_added(
        category: str,
        payee: str,
        amount: str,
        expense_date: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            correlation_id=correlation_id,
            description=f"Expense added: {payee} - {amount}",
            details={
                "category": category,
                "payee": payee,
                "amount": amount,
                "date": expense_date,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_rejected(
        reason: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Expense rejected: {reason}",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def store_saved(
        path: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_SAVED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Wrote {record_count} expense(s) to {path}",
            details={
                "path": path,
                "record_count": record_count,
            },
        )

    @staticmethod
    def store_save_failed(
        path: str,
        error_message: str,
        attempts: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Could not write {path}",
            error_message=error_message,
            details={
                "path": path,
                "attempts": attempts,
            },
        )

    @staticmethod
    def report_generated(
        report_type: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Report generated: {report_type} with {row_count} rows",
            details={
                "report_type": report_type,
                "row_count": row_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
