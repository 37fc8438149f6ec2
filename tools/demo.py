"""
Circulation walkthrough.
==========================

Scripted tour of the lending cycle on the sample catalog: borrowing,
reservations with hand-off on return, overdue fines, partial payments and
waivers. Runs on a fixed clock so every run prints the same dates.

Usage: python -m tools.demo
"""

from datetime import datetime

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from common import env
from common.logging_utils import setup_pretty_logging
from common.time_utils import FixedClock
from circulation.catalog import Catalog
from circulation.errors import CirculationError
from circulation.money import Money
from tools.seed_catalog import build_catalog, render_catalog

app = typer.Typer(help="Circulation walkthrough")
console = Console()


class CirculationDemo:
    """Runs each demo step against one catalog"""

    def __init__(self, catalog: Catalog, clock: FixedClock):
        self.catalog = catalog
        self.clock = clock

    def step(self, title: str, subtitle: str) -> None:
        console.print(Panel.fit(
            f"[bold yellow]{title}[/bold yellow]\n[dim]{subtitle}[/dim]",
            border_style="yellow"
        ))

    def show(self, label: str, result: object) -> None:
        style = "green" if result else "red"
        console.print(f"[cyan]{label}[/cyan] -> [{style}]{result}[/{style}]")

    def attempt(self, label: str, action) -> None:
        """Run an action that may raise a circulation error"""
        try:
            self.show(label, action())
        except CirculationError as e:
            console.print(f"[cyan]{label}[/cyan] -> [red]{type(e).__name__}: {e}[/red]")

    def borrowing(self) -> None:
        self.step("Borrowing", f"Clock: {self.clock.now():%Y-%m-%d}")
        self.show("Alice borrows '1984' for 1 day", self.catalog.borrow("1984", "Alice", 1))
        self.show("Bob tries to borrow '1984'", self.catalog.borrow("1984", "Bob"))
        self.show("Erin borrows 'Dune' for 7 days", self.catalog.borrow("Dune", "Erin", 7))

    def reservations(self) -> None:
        self.step("Reservations", "FIFO queue, no duplicates")
        self.show("Bob reserves '1984'", self.catalog.reserve("1984", "Bob"))
        self.show("Carol reserves '1984'", self.catalog.reserve("1984", "Carol"))
        self.show("Bob reserves '1984' again", self.catalog.reserve("1984", "Bob"))
        console.print(f"Queue: {self.catalog.reservations('1984')}")

    def fines(self) -> None:
        self.clock.advance(days=6)
        self.step("Overdue fines", f"Clock advanced to {self.clock.now():%Y-%m-%d}; {self.catalog.policy!r}")
        copy = self.catalog.find_by_title("1984")
        console.print(f"'1984' overdue: {copy.is_overdue()}, days overdue: {copy.days_overdue()}")
        console.print(f"Fines assessed: {self.catalog.assess_all_fines()}")
        self.attempt("Pay $1.50", lambda: self.catalog.pay_fine("1984", Money("1.50")))
        self.attempt("Pay $100.00", lambda: self.catalog.pay_fine("1984", Money("100.00")))
        self.attempt("Pay $1.00", lambda: self.catalog.pay_fine("1984", Money("1.00")))
        self.attempt("Pay again", lambda: self.catalog.pay_fine("1984", Money("0.50")))
        console.print(copy.current_fine.describe())
        self.attempt("Waive 'Dune' before it is overdue", lambda: self.catalog.waive_fine("Dune", "Courtesy"))
        self.clock.advance(days=3)
        self.show("Assess 'Dune'", self.catalog.assess_fine("Dune"))
        self.attempt("Waive 'Dune'", lambda: self.catalog.waive_fine("Dune", "First offence"))
        self.attempt("Waive 'Dune' again", lambda: self.catalog.waive_fine("Dune", "Again"))

    def returns(self) -> None:
        self.step("Returns", "Queue head receives the copy")
        self.show("Return '1984'", self.catalog.return_copy("1984"))
        copy = self.catalog.find_by_title("1984")
        console.print(f"'1984' now held by {copy.holder} until {copy.due_date}")
        self.show("Return 'Dune'", self.catalog.return_copy("Dune"))

    def summary(self) -> None:
        console.print(render_catalog(self.catalog))
        table = Table(title="Fines", box=box.ROUNDED)
        table.add_column("Copy", style="cyan")
        table.add_column("Fine")
        for copy in self.catalog.copies():
            if copy.current_fine is not None:
                table.add_row(copy.title, copy.current_fine.describe())
        console.print(table)
        console.print(f"Total unpaid fines: {self.catalog.total_unpaid_fines().format()}")


@app.command()
def main(
    pretty: bool = typer.Option(False, "--pretty", "-p", help="Show catalog events with rich logging"),
):
    """Run the circulation walkthrough"""
    if pretty:
        setup_pretty_logging(env.LOG_LEVEL)

    clock = FixedClock(datetime(2024, 3, 1, 10, 0))
    demo = CirculationDemo(build_catalog(clock=clock, pretty=pretty), clock)

    console.print(Panel.fit(
        f"[bold blue]{demo.catalog.name}[/bold blue]\n[dim]Circulation walkthrough[/dim]",
        border_style="blue"
    ))
    demo.borrowing()
    demo.reservations()
    demo.fines()
    demo.returns()
    demo.summary()


if __name__ == "__main__":
    app()
