"""
Request replay client.
Reads circulation requests from a text file and routes them through the
catalog router against the sample catalog, on a controllable clock.
"""

import typer
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich import box

from common import env
from common.logging_utils import log_message, setup_json_logging, setup_pretty_logging
from common.time_utils import FixedClock
from circulation.router import CatalogRouter
from tools.seed_catalog import build_catalog, render_catalog

app = typer.Typer(help="Replay circulation requests against the sample catalog")
console = Console()

# op -> names of the fields that follow the title, in order
REQUEST_FIELDS: Dict[str, List[str]] = {
    "BORROW": ["person", "days"],
    "RETURN": [],
    "RESERVE": ["person"],
    "CANCEL": ["person"],
    "ASSESS": [],
    "PAY": ["amount"],
    "WAIVE": ["reason"],
    "RATE": ["rating"],
}

ADVANCE = "ADVANCE"


def parse_request_line(line: str) -> Optional[Dict[str, Any]]:
    """
    Parse one request line.

    Expected format (fields separated by '|'):
    BORROW | 1984 | Alice | 7
    PAY | 1984 | 2.50
    ASSESS_ALL
    ADVANCE | 10

    Returns:
        Request dictionary, or None for blank lines and comments

    Raises:
        ValueError: the line is malformed
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    parts = [part.strip() for part in line.split("|")]
    op = parts[0].upper()

    if op == ADVANCE:
        if len(parts) != 2:
            raise ValueError(f"ADVANCE takes one argument: {line}")
        return {"op": ADVANCE, "days": int(parts[1])}

    if op == "ASSESS_ALL":
        return {"op": op}

    if op not in REQUEST_FIELDS:
        raise ValueError(f"Unknown operation '{op}'")

    names = REQUEST_FIELDS[op]
    values = parts[2:]
    if len(parts) < 2 or len(values) > len(names):
        raise ValueError(f"Wrong number of fields for {op}: {line}")

    request: Dict[str, Any] = {"op": op, "title": parts[1]}
    request.update(zip(names, values))
    return request


def load_requests_from_file(file_path: Path) -> List[Dict[str, Any]]:
    """Load requests from a request file, skipping malformed lines"""
    requests = []

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                try:
                    request = parse_request_line(line)
                except ValueError as e:
                    log_message("CLI", f"line-{line_num}", "INIT", "error", str(e))
                    continue
                if request is not None:
                    requests.append(request)

    except FileNotFoundError:
        typer.echo(f"Error: File {file_path} not found", err=True)
        raise typer.Exit(1)

    return requests


def replay(router: CatalogRouter, clock: FixedClock, requests: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Route every request in order; ADVANCE lines move the clock"""
    replies = []
    for request in requests:
        if request["op"] == ADVANCE:
            clock.advance(days=request["days"])
            continue
        replies.append(router.handle_request(request))
    return replies


def render_replies(replies: List[Dict[str, Any]]) -> Table:
    table = Table(title="Replies", box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Op", style="cyan")
    table.add_column("Status")
    table.add_column("Holder")
    table.add_column("Due", style="yellow")
    table.add_column("Fine")
    table.add_column("Reason", style="dim")

    styles = {"OK": "green", "REJECTED": "yellow", "ERROR": "red"}
    for i, reply in enumerate(replies, 1):
        fine = reply.get("fine")
        fine_text = ""
        if fine:
            fine_text = f"{fine['amountPaid']}/{fine['amountDue']}"
            if fine["waived"]:
                fine_text += " waived"
            elif fine["settled"]:
                fine_text += " paid"
        style = styles.get(reply["status"], "white")
        table.add_row(
            str(i), reply["op"], f"[{style}]{reply['status']}[/{style}]",
            reply.get("holder") or "-", reply.get("dueDate") or "-",
            fine_text, reply.get("reason") or "",
        )
    return table


@app.command()
def main(
    file: Path = typer.Option(
        env.REQUESTS_FILE, "--file", "-f",
        help="Path to the request file"
    ),
    start: Optional[datetime] = typer.Option(
        None, "--start",
        help="Clock start instant (default: now)"
    ),
    pretty: bool = typer.Option(
        env.LOG_PRETTY, "--pretty", "-p",
        help="Enable pretty logging"
    ),
):
    """
    Replay requests from a file.

    Each request is routed through the catalog router; the replies and the
    final catalog state are printed.
    """
    if pretty:
        setup_pretty_logging(env.LOG_LEVEL)
    else:
        setup_json_logging(env.LOG_LEVEL)

    typer.echo(f"Loading requests from {file}...")
    requests = load_requests_from_file(file)
    if not requests:
        typer.echo("No valid requests found in file", err=True)
        raise typer.Exit(1)
    typer.echo(f"Loaded {len(requests)} requests")

    clock = FixedClock(start or datetime.now())
    catalog = build_catalog(clock=clock, pretty=pretty)
    router = CatalogRouter(catalog, pretty)

    replies = replay(router, clock, requests)

    console.print(render_replies(replies))
    console.print(render_catalog(catalog))

    stats = catalog.stats()
    console.print(
        f"[bold]Summary:[/bold] {len(replies)} requests, "
        f"{sum(1 for r in replies if r['status'] == 'OK')} applied, "
        f"{stats['overdue']} overdue, unpaid fines ${stats['unpaid_fines']}"
    )


if __name__ == "__main__":
    app()
