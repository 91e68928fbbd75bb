"""Tests for the entry/report flows and component wiring."""

import pytest
from datetime import date
from decimal import Decimal

from expense_tracker.audit import AuditLogger
from expense_tracker.config import AppSettings, Settings
from expense_tracker.models.audit import AuditEventBuilder, AuditEventType
from expense_tracker.models.expense import RawExpenseInput
from expense_tracker.orchestrator import ExpenseEntryFlow, ReportFlow, create_app_components
from expense_tracker.validation import ExpenseInputValidator


@pytest.fixture
def entry_flow(store, audit_logger):
    validator = ExpenseInputValidator(
        AppSettings(max_expense_amount=1000),
        today=date(2024, 3, 31),
    )
    return ExpenseEntryFlow(store=store, validator=validator, audit_logger=audit_logger)


@pytest.fixture
def report_flow(store, audit_logger):
    return ReportFlow(store=store, audit_logger=audit_logger)


class TestExpenseEntryFlow:

    def test_valid_entry_is_stored(self, entry_flow, store, data_file):
        result, store_result = entry_flow.submit(RawExpenseInput(
            category="Food", payee="Market", amount="7.13", date="2024-03-01",
        ))
        assert result.is_valid
        assert store_result.success
        assert data_file.read_text(encoding="utf-8") == "2024-03-01,Food,Market,7.13\n"

    def test_invalid_entry_never_reaches_store(self, entry_flow, store, audit_storage):
        result, store_result = entry_flow.submit(RawExpenseInput(
            category="Food", payee="Market", amount="0",
        ))
        assert store_result is None
        assert store.all() == ()
        latest = audit_storage.get_recent_events(limit=1)[0]
        assert latest.event_type == AuditEventType.EXPENSE_REJECTED

    def test_declined_warning_discards_entry(self, entry_flow, store):
        seen = []

        def decline(result):
            seen.append(result)
            return False

        result, store_result = entry_flow.submit(
            RawExpenseInput(category="Rent", payee="Landlord", amount="1200", date="2024-03-01"),
            confirm_warnings=decline,
        )
        assert len(seen) == 1
        assert result.has_warnings
        assert store_result is None
        assert store.all() == ()

    def test_confirmed_warning_is_stored(self, entry_flow, store):
        _, store_result = entry_flow.submit(
            RawExpenseInput(category="Rent", payee="Landlord", amount="1200", date="2024-03-01"),
            confirm_warnings=lambda result: True,
        )
        assert store_result.success
        assert store.all()[0].amount == Decimal("1200")

    def test_confirmer_not_called_without_warnings(self, entry_flow):
        def explode(result):
            raise AssertionError("should not be asked")

        _, store_result = entry_flow.submit(
            RawExpenseInput(category="Food", payee="Market", amount="7.13", date="2024-03-01"),
            confirm_warnings=explode,
        )
        assert store_result.success

    def test_entry_events_share_one_correlation_id(self, entry_flow, audit_storage):
        entry_flow.submit(RawExpenseInput(
            category="Food", payee="Market", amount="7.13", date="2024-03-01",
        ))

        events = audit_storage.get_recent_events()
        assert {e.event_type for e in events} >= {
            AuditEventType.EXPENSE_ADDED,
            AuditEventType.STORE_SAVED,
        }
        correlation_ids = {
            e.correlation_id for e in events
            if e.event_type in (AuditEventType.EXPENSE_ADDED, AuditEventType.STORE_SAVED)
        }
        assert len(correlation_ids) == 1
        assert None not in correlation_ids


class TestReportFlow:

    def test_reports_reflect_store(self, entry_flow, report_flow):
        entry_flow.submit(RawExpenseInput(
            category="Food", payee="Market", amount="7.13", date="2024-03-01",
        ))
        entry_flow.submit(
            RawExpenseInput(category="Rent", payee="Landlord", amount="1200.00", date="2024-03-01"),
            confirm_warnings=lambda result: True,
        )

        assert [(g.key, g.total) for g in report_flow.totals_by_payee()] == [
            ("Landlord", Decimal("1200.00")),
            ("Market", Decimal("7.13")),
        ]
        assert report_flow.summary().total_amount == Decimal("1207.13")
        assert [e.payee for e in report_flow.listing()] == ["Market", "Landlord"]
        assert [g.key for g in report_flow.totals_by_category()] == ["Rent", "Food"]
        assert [g.key for g in report_flow.totals_by_month()] == ["2024-03"]

    def test_reports_are_audited(self, report_flow, audit_storage):
        report_flow.totals_by_category()
        latest = audit_storage.get_recent_events(limit=1)[0]
        assert latest.event_type == AuditEventType.REPORT_GENERATED
        assert latest.details["report_type"] == "by_category"


class TestAuditLogger:

    def test_log_without_storage_succeeds(self):
        logger = AuditLogger()
        assert logger.log(AuditEventBuilder.no_prior_data("x.csv")) is True
        assert logger.recent_events() == []

    def test_failing_storage_does_not_raise(self):
        class BrokenStorage:
            def append_event(self, event):
                raise RuntimeError("audit sink down")

        logger = AuditLogger(BrokenStorage())
        assert logger.log(AuditEventBuilder.no_prior_data("x.csv")) is False


class TestCreateAppComponents:

    def test_components_share_store_and_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EXPENSE_STORAGE_DATA_FILE", str(tmp_path / "ledger.csv"))
        monkeypatch.setenv("EXPENSE_APP_RECENT_ACTIVITY_LIMIT", "5")

        store, entry_flow, report_flow, audit_logger = create_app_components(Settings())

        assert store.path == tmp_path / "ledger.csv"
        assert store.load().data_found is False
        for day in range(1, 8):
            store.add_expense("Food", "Cafe", "1", date(2024, 1, day))
        assert len(audit_logger.recent_events(limit=100)) == 5
        assert len(report_flow.listing()) == 7
