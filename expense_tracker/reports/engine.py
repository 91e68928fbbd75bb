"""
Reporting Engine

DESIGN DECISION: Reports are pure functions of a record sequence.
The engine never touches the store or the file; it receives a read-only
snapshot and returns new lists.

ORDERING GUARANTEES:
- Listings are stable: equal dates keep insertion order
- Grouped totals are ordered by descending total; equal totals keep the
  order in which their group was first seen
"""

import datetime as dt
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from expense_tracker.models.expense import Expense, ExpenseSummary, GroupTotal


class ReportingEngine:
    """
    Computes sorted listings and grouped aggregates over expenses.

    GUARANTEES:
    - Only reads the records it is given
    - Sums are exact (Decimal)
    - Output order is deterministic
    """

    def list_descending_by_date(self, records: Iterable[Expense]) -> list[Expense]:
        """Most recent first. sorted() is stable, also with reverse=True."""
        return sorted(records, key=lambda expense: expense.date, reverse=True)

    def total_amount(self, records: Iterable[Expense]) -> Decimal:
        """Exact sum of all amounts; Decimal('0') for no records."""
        return sum((expense.amount for expense in records), Decimal("0"))

    def group_by_payee(self, records: Iterable[Expense]) -> list[GroupTotal]:
        """Totals per payee (exact, case-sensitive match), largest first."""
        return self._group(records, lambda expense: expense.payee)

    def group_by_category(self, records: Iterable[Expense]) -> list[GroupTotal]:
        """Totals per category (exact, case-sensitive match), largest first."""
        return self._group(records, lambda expense: expense.category)

    def group_by_month(self, records: Iterable[Expense]) -> list[GroupTotal]:
        """Totals per calendar month (YYYY-MM), largest first."""
        return self._group(records, lambda expense: expense.date.strftime("%Y-%m"))

    def filter_by_date_range(
        self,
        records: Iterable[Expense],
        date_from: Optional[dt.date] = None,
        date_to: Optional[dt.date] = None,
    ) -> list[Expense]:
        """Records dated within [date_from, date_to]; either bound may be open."""
        return [
            expense for expense in records
            if (date_from is None or expense.date >= date_from)
            and (date_to is None or expense.date <= date_to)
        ]

    def summarize(self, records: Sequence[Expense]) -> ExpenseSummary:
        """Overall count, total, date span and both breakdowns."""
        dates = [expense.date for expense in records]
        return ExpenseSummary(
            record_count=len(records),
            total_amount=self.total_amount(records),
            first_date=min(dates) if dates else None,
            last_date=max(dates) if dates else None,
            by_payee=self.group_by_payee(records),
            by_category=self.group_by_category(records),
        )

    def _group(
        self,
        records: Iterable[Expense],
        key: Callable[[Expense], str],
    ) -> list[GroupTotal]:
        """Sum amounts per key; dicts keep first-seen order for the tie-break."""
        totals: dict[str, Decimal] = {}
        counts: dict[str, int] = {}

        for expense in records:
            group = key(expense)
            totals[group] = totals.get(group, Decimal("0")) + expense.amount
            counts[group] = counts.get(group, 0) + 1

        ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return [
            GroupTotal(key=group, total=total, count=counts[group])
            for group, total in ordered
        ]
