"""
Interactive Shell for Expense Tracker

A text menu on top of the orchestrator flows. The shell only reads
choices and field values and prints results; every decision about
validity, persistence and ordering is made by the core.

DESIGN PRINCIPLES:
1. One menu, one action at a time
2. Clear error messages, then back to the menu
3. No hidden writes: every save outcome is printed
"""

from decimal import Decimal
from typing import Callable, Optional, TextIO

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from expense_tracker.audit import AuditLogger, configure_logging
from expense_tracker.config import Settings, get_settings
from expense_tracker.models.expense import (
    GroupTotal,
    InputValidationResult,
    RawExpenseInput,
    StoreResult,
)
from expense_tracker.orchestrator import (
    ExpenseEntryFlow,
    ReportFlow,
    create_app_components,
)
from expense_tracker.services.storage import FlatFileExpenseStore


MENU = [
    ("1", "Add expense"),
    ("2", "List expenses (most recent first)"),
    ("3", "Totals by payee"),
    ("4", "Totals by category"),
    ("5", "Totals by month"),
    ("6", "Summary"),
    ("7", "Recent activity"),
    ("q", "Quit"),
]


class ExpenseShell:
    """Menu loop driving the entry and report flows."""

    def __init__(
        self,
        store: FlatFileExpenseStore,
        entry_flow: ExpenseEntryFlow,
        report_flow: ReportFlow,
        audit_logger: AuditLogger,
        console: Optional[Console] = None,
        stream: Optional[TextIO] = None,
        currency_symbol: str = "$",
    ):
        """
        Args:
            console: Where output goes; a default Console if None.
            stream: Where answers are read from; the terminal if None.
        """
        self._store = store
        self._entry_flow = entry_flow
        self._report_flow = report_flow
        self._audit_logger = audit_logger
        self._console = console or Console()
        self._stream = stream
        self._currency_symbol = currency_symbol
        self._actions: dict[str, Callable[[], None]] = {
            "1": self.add_expense,
            "2": self.show_listing,
            "3": self.show_by_payee,
            "4": self.show_by_category,
            "5": self.show_by_month,
            "6": self.show_summary,
            "7": self.show_recent_activity,
        }

    def run(self) -> None:
        """Load the ledger, then serve the menu until the user quits."""
        self._console.print(Panel.fit("[bold cyan]Expense Tracker[/bold cyan]", border_style="cyan"))
        self._print_store_result(self._store.load())

        while True:
            try:
                choice = self._ask_choice()
            except (KeyboardInterrupt, EOFError):
                self._console.print()
                break

            if choice is None or choice in ("q", "quit", "exit"):
                break

            action = self._actions.get(choice)
            if action is None:
                self._console.print(f"[yellow]Unknown choice: {choice}[/yellow]")
                continue

            try:
                action()
            except (KeyboardInterrupt, EOFError):
                self._console.print("\n[yellow]Cancelled.[/yellow]")
            except Exception as e:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"menu_choice": choice},
                )
                self._console.print(f"[red]Error: {escape(str(e))}[/red]")

        self._console.print("[dim]Goodbye.[/dim]")

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def add_expense(self) -> None:
        raw = RawExpenseInput(
            category=self._ask("Category"),
            payee=self._ask("Payee"),
            amount=self._ask("Amount"),
            date=self._ask("Date (YYYY-MM-DD, blank for today)", allow_blank=True),
        )

        result, store_result = self._entry_flow.submit(raw, confirm_warnings=self._confirm_warnings)

        if not result.is_valid:
            for issue in result.issues:
                hint = f" [dim]({issue.suggested_fix})[/dim]" if issue.suggested_fix else ""
                self._console.print(f"[red]{issue.field}: {issue.message}[/red]{hint}")
            return

        if store_result is None:
            self._console.print("[yellow]Expense discarded.[/yellow]")
            return

        self._print_store_result(store_result)

    def show_listing(self) -> None:
        rows = self._report_flow.listing()
        if not rows:
            self._console.print("[dim]No expenses recorded yet.[/dim]")
            return

        table = Table("Date", "Category", "Payee", "Amount", title="Expenses", box=box.ROUNDED)
        for expense in rows:
            table.add_row(
                expense.date.isoformat(),
                expense.category,
                expense.payee,
                self._money(expense.amount),
            )
        self._console.print(table)

    def show_by_payee(self) -> None:
        self._print_groups("Totals by payee", "Payee", self._report_flow.totals_by_payee())

    def show_by_category(self) -> None:
        self._print_groups("Totals by category", "Category", self._report_flow.totals_by_category())

    def show_by_month(self) -> None:
        self._print_groups("Totals by month", "Month", self._report_flow.totals_by_month())

    def show_summary(self) -> None:
        summary = self._report_flow.summary()
        if summary.record_count == 0:
            self._console.print("[dim]No expenses recorded yet.[/dim]")
            return

        self._console.print(Panel(
            f"Expenses: [bold]{summary.record_count}[/bold]\n"
            f"Total: [bold]{self._money(summary.total_amount)}[/bold]\n"
            f"From {summary.first_date.isoformat()} to {summary.last_date.isoformat()}",
            title="Summary",
            border_style="green",
        ))
        self._print_groups("Top payees", "Payee", summary.by_payee[:5])
        self._print_groups("Top categories", "Category", summary.by_category[:5])

    def show_recent_activity(self) -> None:
        events = self._audit_logger.recent_events()
        if not events:
            self._console.print("[dim]No activity yet.[/dim]")
            return

        table = Table("Time (UTC)", "Event", "Description", title="Recent activity", box=box.ROUNDED)
        for event in events:
            table.add_row(
                event.timestamp.strftime("%H:%M:%S"),
                event.event_type.value,
                event.description,
            )
        self._console.print(table)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _ask_choice(self) -> Optional[str]:
        self._console.print()
        for key, label in MENU:
            self._console.print(f"  [bold]{key}[/bold]  {label}")
        answer = Prompt.ask("Choose", console=self._console, stream=self._stream)
        if self._stream is not None and answer == "" and self._at_end_of_stream():
            return None
        return answer.strip().lower()

    def _ask(self, label: str, allow_blank: bool = False) -> str:
        answer = Prompt.ask(label, console=self._console, stream=self._stream)
        if not answer and not allow_blank and self._stream is not None and self._at_end_of_stream():
            raise EOFError
        return answer

    def _at_end_of_stream(self) -> bool:
        position = self._stream.tell()
        at_end = self._stream.read(1) == ""
        self._stream.seek(position)
        return at_end

    def _confirm_warnings(self, result: InputValidationResult) -> bool:
        for issue in result.issues:
            self._console.print(f"[yellow]Warning - {issue.message}[/yellow]")
        return Confirm.ask("Save anyway?", console=self._console, stream=self._stream, default=False)

    def _print_groups(self, title: str, label: str, groups: list[GroupTotal]) -> None:
        if not groups:
            self._console.print("[dim]No expenses recorded yet.[/dim]")
            return

        table = Table(label, "Entries", "Total", title=title, box=box.ROUNDED)
        for group in groups:
            table.add_row(group.key, str(group.count), self._money(group.total))
        self._console.print(table)

    def _print_store_result(self, result: StoreResult) -> None:
        style = "green" if result.success else "red"
        self._console.print(f"[{style}]{result.message}[/{style}]")

    def _money(self, amount: Decimal) -> str:
        return f"{self._currency_symbol}{amount:,.2f}"


def build_shell(
    settings: Optional[Settings] = None,
    console: Optional[Console] = None,
    stream: Optional[TextIO] = None,
) -> ExpenseShell:
    """Wire the components into a ready-to-run shell."""
    settings = settings or get_settings()
    store, entry_flow, report_flow, audit_logger = create_app_components(settings)
    return ExpenseShell(
        store=store,
        entry_flow=entry_flow,
        report_flow=report_flow,
        audit_logger=audit_logger,
        console=console,
        stream=stream,
        currency_symbol=settings.app.currency_symbol,
    )


def main() -> None:
    """Console entry point."""
    settings = get_settings()
    configure_logging(settings.logging)
    build_shell(settings).run()


if __name__ == "__main__":
    main()
