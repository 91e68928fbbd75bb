"""
Audit Logger

DESIGN DECISION: Every store and report operation is logged.
This provides:
1. Traceability of every write to the backing file
2. Debugging capability when a load is rejected
3. A recent-activity history the user can inspect

The audit logger:
- Always writes to the structured local log
- Gracefully handles failures of the audit store (never crashes the app)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.config import LoggingSettings
from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from expense_tracker.services.storage.interface import AuditStorageInterface


_LEVELS = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.INFO: "info",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
    AuditSeverity.CRITICAL: "critical",
}


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog on top of stdlib logging.

    Log lines go to settings.file when set, otherwise to stderr, so they
    never interleave with the interactive menu on stdout.
    """
    settings = settings or LoggingSettings()

    handler: logging.Handler
    if settings.file is not None:
        handler = logging.FileHandler(settings.file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.renderer == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store, if one is attached (for the recent activity view)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for audit history.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("expense_tracker.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Appends to storage if available.

        Returns True if the storage append succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()
        getattr(self._logger, _LEVELS[event.severity])("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Newest-first audit history, empty when no storage is attached."""
        if self._storage is None:
            return []
        return self._storage.get_recent_events(limit=limit)

    def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log rejected user input."""
        event = AuditEventBuilder.expense_rejected(
            reason=f"{len(issues)} validation issue(s)",
            issues=issues,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_report_generated(
        self,
        report_type: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log report generation."""
        event = AuditEventBuilder.report_generated(
            report_type=report_type,
            row_count=row_count,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., one expense entry).
    """
    return uuid4()
