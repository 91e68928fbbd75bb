"""
Flat File Storage Implementation

DESIGN DECISION: Expenses live in one plain text file, one record per
line, because:
1. The user can open and read their ledger in any editor
2. No database setup required
3. A personal ledger stays in the low thousands of records

TRADEOFFS:
- Every add rewrites the whole file (fine at this scale)
- No locking: a second process editing the file concurrently is unsupported,
  the last full write wins
- Corrupt content is never partially trusted: one bad line empties the load

Writes go to a temporary sibling file that is then moved over the
backing file, so a failed save leaves the previous file intact.
"""

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union
from uuid import UUID

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from expense_tracker.codec import FormatError, LineCodec
from expense_tracker.config import StorageSettings
from expense_tracker.models.audit import AuditEvent, AuditEventBuilder
from expense_tracker.models.expense import (
    Expense,
    StoreErrorKind,
    StoreOperation,
    StoreResult,
)
from expense_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    StorageIOError,
)

if TYPE_CHECKING:
    from expense_tracker.audit import AuditLogger


logger = structlog.get_logger(__name__)


class FlatFileExpenseStore(ExpenseStorageInterface):
    """
    Expense store backed by a comma-delimited text file.

    Holds the records in memory for the process lifetime; the file is
    read once by load() and rewritten in full by every save().
    """

    def __init__(
        self,
        path: Union[str, Path],
        codec: Optional[LineCodec] = None,
        encoding: str = "utf-8",
        retry_attempts: int = 3,
        retry_wait_seconds: float = 0.1,
        audit_logger: Optional["AuditLogger"] = None,
    ):
        """
        Initialize the store. Nothing is read until load() is called.

        Args:
            path: Backing file location.
            codec: Line codec; a default LineCodec if None.
            retry_attempts: Total write attempts per save.
            audit_logger: Receives an event for every load/add/save outcome.
        """
        self._path = Path(path)
        self._codec = codec or LineCodec()
        self._encoding = encoding
        self._retry_attempts = retry_attempts
        self._retry_wait_seconds = retry_wait_seconds
        self._audit_logger = audit_logger
        self._records: list[Expense] = []

    @classmethod
    def from_settings(
        cls,
        settings: StorageSettings,
        audit_logger: Optional["AuditLogger"] = None,
    ) -> "FlatFileExpenseStore":
        return cls(
            path=settings.data_file,
            encoding=settings.encoding,
            retry_attempts=settings.save_retry_attempts,
            retry_wait_seconds=settings.save_retry_wait_seconds,
            audit_logger=audit_logger,
        )

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> tuple[Expense, ...]:
        return tuple(self._records)

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    def load(self) -> StoreResult:
        path = str(self._path)

        if not self._path.exists():
            self._records = []
            self._audit(AuditEventBuilder.no_prior_data(path))
            return StoreResult(
                operation=StoreOperation.LOAD,
                success=True,
                data_found=False,
            )

        try:
            records = self._read_records()
        except FormatError as e:
            self._records = []
            self._audit(AuditEventBuilder.store_load_failed(
                path=path,
                error_kind=StoreErrorKind.FORMAT.value,
                error_message=str(e),
                line_number=e.line_number,
            ))
            return StoreResult(
                operation=StoreOperation.LOAD,
                success=False,
                error_kind=StoreErrorKind.FORMAT,
                error_message=str(e),
                line_number=e.line_number,
            )
        except StorageIOError as e:
            self._records = []
            self._audit(AuditEventBuilder.store_load_failed(
                path=path,
                error_kind=StoreErrorKind.IO.value,
                error_message=str(e),
            ))
            return StoreResult(
                operation=StoreOperation.LOAD,
                success=False,
                error_kind=StoreErrorKind.IO,
                error_message=str(e),
            )

        self._records = records
        self._audit(AuditEventBuilder.store_loaded(path, len(records)))
        return StoreResult(
            operation=StoreOperation.LOAD,
            success=True,
            record_count=len(records),
        )

    def _read_records(self) -> list[Expense]:
        """
        Decode every non-blank line of the backing file.

        Raises:
            FormatError: on the first line that does not decode, with
                line_number set.
            StorageIOError: if the file cannot be opened or read.
        """
        records: list[Expense] = []
        try:
            with self._path.open("r", encoding=self._encoding) as handle:
                for line_number, line in enumerate(handle, start=1):
                    if not line.strip():
                        continue
                    try:
                        records.append(self._codec.decode(line))
                    except FormatError as e:
                        e.line_number = line_number
                        raise
        except (OSError, UnicodeDecodeError, LookupError) as e:
            raise StorageIOError(f"Could not read {self._path}: {e}") from e
        return records

    # -------------------------------------------------------------------------
    # Add / Save
    # -------------------------------------------------------------------------

    def add(
        self,
        expense: Expense,
        correlation_id: Optional[UUID] = None,
    ) -> StoreResult:
        try:
            self._encode_line(expense)
        except FormatError as e:
            self._audit(AuditEventBuilder.expense_rejected(
                reason=str(e),
                issues=[{"field": "record", "issue_type": "unencodable", "message": str(e)}],
                correlation_id=correlation_id,
            ))
            return StoreResult(
                operation=StoreOperation.ADD,
                success=False,
                record_count=len(self._records),
                error_kind=StoreErrorKind.FORMAT,
                error_message=str(e),
            )

        self._records.append(expense)
        self._audit(AuditEventBuilder.expense_added(
            category=expense.category,
            payee=expense.payee,
            amount=str(expense.amount),
            expense_date=expense.date.isoformat(),
            correlation_id=correlation_id,
        ))

        saved = self.save(correlation_id=correlation_id)
        if not saved.success:
            return StoreResult(
                operation=StoreOperation.ADD,
                success=False,
                record_count=len(self._records),
                error_kind=saved.error_kind,
                error_message=saved.error_message,
            )

        return StoreResult(
            operation=StoreOperation.ADD,
            success=True,
            record_count=len(self._records),
        )

    def save(self, correlation_id: Optional[UUID] = None) -> StoreResult:
        path = str(self._path)

        try:
            content = "".join(
                self._encode_line(expense) + "\n" for expense in self._records
            )
        except FormatError as e:
            self._audit(AuditEventBuilder.store_save_failed(
                path, str(e), attempts=0, correlation_id=correlation_id,
            ))
            return StoreResult(
                operation=StoreOperation.SAVE,
                success=False,
                record_count=len(self._records),
                error_kind=StoreErrorKind.FORMAT,
                error_message=str(e),
            )

        try:
            self._write_with_retry(content)
        except StorageIOError as e:
            self._audit(AuditEventBuilder.store_save_failed(
                path, str(e), attempts=self._retry_attempts,
                correlation_id=correlation_id,
            ))
            return StoreResult(
                operation=StoreOperation.SAVE,
                success=False,
                record_count=len(self._records),
                error_kind=StoreErrorKind.IO,
                error_message=str(e),
            )

        self._audit(AuditEventBuilder.store_saved(
            path, len(self._records), correlation_id=correlation_id,
        ))
        return StoreResult(
            operation=StoreOperation.SAVE,
            success=True,
            record_count=len(self._records),
        )

    def _encode_line(self, expense: Expense) -> str:
        """
        Encode one record and check the file encoding can hold it.

        Raises:
            FormatError: if the codec refuses the record, or a character
                of it has no representation in the configured encoding.
        """
        line = self._codec.encode(expense)
        try:
            line.encode(self._encoding)
        except UnicodeEncodeError as e:
            raise FormatError(
                f"{line!r} cannot be written in the {self._encoding} encoding "
                f"({e.object[e.start:e.end]!r} is not representable)"
            ) from e
        return line

    def _write_with_retry(self, content: str) -> None:
        """
        Write the content, retrying transient OS errors.

        Raises:
            StorageIOError: when every attempt failed.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_fixed(self._retry_wait_seconds),
            retry=retry_if_exception_type(OSError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            retrying(self._write_atomically, content)
        except (OSError, UnicodeEncodeError) as e:
            raise StorageIOError(f"Could not write {self._path}: {e}") from e

    def _write_atomically(self, content: str) -> None:
        """
        Write to a temp file next to the target, then move it into place.

        The temp file never outlives a failed attempt.
        """
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        temp_name: Optional[str] = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding=self._encoding,
                dir=directory,
                prefix=f".{self._path.name}-",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self._path)
        except Exception:
            if temp_name is not None and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "store_write_retry",
            path=str(self._path),
            attempt=retry_state.attempt_number,
            error=str(exc),
        )

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)
