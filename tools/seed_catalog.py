"""
Seed data generator for the catalog.
Builds the sample catalog used by the demo and replay tools, optionally
padded with generated copies for load testing.
"""

import random
import typer
from typing import List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich import box

from common import env
from common.time_utils import Clock, SYSTEM_CLOCK
from circulation.catalog import Catalog
from circulation.category import Category
from circulation.errors import InvalidArgumentError
from circulation.policy import FinePolicy

app = typer.Typer(help="Catalog seed data")
console = Console()

SAMPLE_COPIES: List[Tuple[str, str, str, int, Category]] = [
    ("978-0451524935", "1984", "George Orwell", 1949, Category.CLASSIC),
    ("978-0061120084", "To Kill a Mockingbird", "Harper Lee", 1960, Category.CLASSIC),
    ("978-0743273565", "The Great Gatsby", "F. Scott Fitzgerald", 1925, Category.CLASSIC),
    ("978-0451526342", "Animal Farm", "George Orwell", 1945, Category.CLASSIC),
    ("978-0441172719", "Dune", "Frank Herbert", 1965, Category.SCIENCE_FICTION),
    ("978-0547928227", "The Hobbit", "J.R.R. Tolkien", 1937, Category.FANTASY),
    ("978-1451648539", "Steve Jobs", "Walter Isaacson", 2011, Category.BIOGRAPHY),
]

GENERATED_TITLES = [
    "Fahrenheit 451", "Brave New World", "Moby Dick", "Pride and Prejudice",
    "The Name of the Rose", "Foundation", "Neuromancer", "Rebecca",
    "The Silmarillion", "A Brief History of Time", "Gone Girl", "Emma",
]

GENERATED_AUTHORS = [
    "Ray Bradbury", "Aldous Huxley", "Herman Melville", "Jane Austen",
    "Umberto Eco", "Isaac Asimov", "William Gibson", "Daphne du Maurier",
]


def build_catalog(
    clock: Clock = SYSTEM_CLOCK,
    policy: Optional[FinePolicy] = None,
    name: str = env.CATALOG_NAME,
    pretty: bool = False,
) -> Catalog:
    """Catalog holding the sample copies"""
    catalog = Catalog(name, policy=policy or FinePolicy.from_env(), clock=clock, pretty=pretty)
    for key, title, author, year, category in SAMPLE_COPIES:
        catalog.add(catalog.new_copy(key, title, author, year, category))
    return catalog


def generate_copies(catalog: Catalog, count: int, seed: Optional[int] = None) -> int:
    """Add `count` generated copies; returns how many were added"""
    rng = random.Random(seed)
    categories = list(Category)
    added = 0
    for i in range(count):
        copy = catalog.new_copy(
            f"GEN-{i:05d}",
            f"{rng.choice(GENERATED_TITLES)} vol. {i}",
            rng.choice(GENERATED_AUTHORS),
            rng.randint(1900, catalog.clock.today().year),
            rng.choice(categories),
        )
        if catalog.add(copy):
            added += 1
    return added


def render_catalog(catalog: Catalog, category: Optional[Category] = None) -> Table:
    copies = catalog.copies() if category is None else catalog.find_by_category(category)
    title = catalog.name if category is None else f"{catalog.name} - {category}"
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Key", style="cyan")
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Year", justify="right")
    table.add_column("Category", style="magenta")
    table.add_column("Status", style="green")
    table.add_column("Due", style="yellow")
    table.add_column("Queue", justify="right")

    for copy in copies:
        status = "Available" if copy.available else f"Held by {copy.holder}"
        if copy.is_overdue():
            status += " (OVERDUE)"
        table.add_row(
            copy.key, copy.title, copy.author, str(copy.year), str(copy.category),
            status, copy.due_date.isoformat() if copy.due_date else "-",
            str(copy.reservation_count),
        )
    return table


@app.command()
def main(
    extra: int = typer.Option(0, "--extra", "-n", help="Number of generated copies to add"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for generated copies"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only list copies in this category"),
):
    """Build the sample catalog and print it"""
    catalog = build_catalog()
    if extra:
        added = generate_copies(catalog, extra, seed)
        console.print(f"[green]Generated {added} extra copies[/green]")
    try:
        selected = Category.parse(category) if category else None
    except InvalidArgumentError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(render_catalog(catalog, selected))
    console.print(f"[dim]Total copies: {len(catalog)}[/dim]")


if __name__ == "__main__":
    app()
