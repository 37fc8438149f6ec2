"""
Standardized JSON logging utilities.
Provides both JSON and pretty (rich) logging formats for circulation events.
"""

import json
import logging
from typing import Optional, Literal
from rich.console import Console
from rich.logging import RichHandler

from .time_utils import format_timestamp_ms, now_ms

# Rich console for pretty logging
console = Console()

# Event logger; the host application decides where records go
logger = logging.getLogger("circulation")

# Component types
ComponentType = Literal["CAT", "CPY", "POL", "RTR", "CLI"]

# Operation types
OperationType = Literal[
    "ADD", "REMOVE", "BORROW", "RETURN", "RESERVE", "CANCEL",
    "ASSESS", "ASSESS_ALL", "PAY", "WAIVE", "RATE", "INIT",
]

# Stage types
StageType = Literal["received", "applied", "rejected", "error"]


def json_log(
    component: ComponentType,
    key: str,
    op: OperationType,
    stage: StageType,
    detail: str
) -> None:
    """
    Log a standardized JSON event through the circulation logger.

    Args:
        component: Emitting component (CAT, CPY, POL, RTR, CLI)
        key: Catalog key or request ID the event refers to
        op: Operation type
        stage: Processing stage (received, applied, rejected, error)
        detail: Additional detail text
    """
    log_entry = {
        "ts": now_ms(),
        "component": component,
        "key": key,
        "op": op,
        "stage": stage,
        "detail": detail
    }

    level = logging.WARNING if stage == "error" else logging.INFO
    logger.log(level, json.dumps(log_entry, ensure_ascii=False))


def setup_pretty_logging(level: str = "INFO") -> None:
    """
    Setup rich logging for pretty console output.
    Call this when --pretty flag is used.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)]
    )


def setup_json_logging(level: str = "INFO") -> None:
    """Emit one JSON event per line on stderr"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
    )


def pretty_log(
    component: ComponentType,
    key: str,
    op: OperationType,
    stage: StageType,
    detail: str
) -> None:
    """
    Log a pretty formatted message using rich.
    """
    timestamp = format_timestamp_ms(now_ms())
    stage_style = {
        "applied": "green",
        "rejected": "yellow",
        "error": "red",
    }.get(stage, "cyan")
    console.print(
        f"[dim]{timestamp}[/dim] "
        f"[bold blue]{component}[/bold blue] "
        f"[yellow]{key[:16]}[/yellow] "
        f"[green]{op}[/green] "
        f"[{stage_style}]{stage}[/{stage_style}] "
        f"{detail}"
    )


def log_message(
    component: ComponentType,
    key: Optional[str],
    op: OperationType,
    stage: StageType,
    detail: str,
    pretty: bool = False
) -> None:
    """
    Unified logging function that chooses format based on pretty flag.
    """
    key = key or "-"
    if pretty:
        pretty_log(component, key, op, stage, detail)
    else:
        json_log(component, key, op, stage, detail)
