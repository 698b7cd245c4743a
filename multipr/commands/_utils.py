"""Shared utilities for multipr CLI commands."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from multipr.constants import POOL
from multipr.exceptions import MultiPRError, ToolingUnavailableError, ValidationError
from multipr.workspace import Workspace

console = Console()


def open_workspace(path: str | Path = ".") -> Workspace:
    """Open the workspace, honouring the log level chosen on the command group."""
    ctx = click.get_current_context(silent=True)
    root_obj = ctx.find_root().obj if ctx is not None else None
    log_level = root_obj.get("log_level") if isinstance(root_obj, dict) else None
    return Workspace.open(path, log_level=log_level)


def print_error(error: MultiPRError) -> None:
    """Print a multipr error, with its hint when there is one."""
    label = "Invalid input" if isinstance(error, ValidationError) else "Error"
    console.print(f"[red]{label}:[/red] {error.message}")
    if isinstance(error, ToolingUnavailableError) and error.hint:
        console.print(f"[dim]{error.hint}[/dim]")


def bucket_table(workspace: Workspace) -> Table:
    """Buckets in processing order."""
    table = Table(title="Buckets")
    table.add_column("#", justify="right")
    table.add_column("Bucket", style="cyan")
    table.add_column("Title")
    table.add_column("Depends on")
    table.add_column("Files", justify="right")

    for bucket in workspace.store.list_ordered():
        order = "" if bucket.order is None else str(bucket.order + 1)
        depends_on = bucket.depends_on or "-"
        if bucket.depends_on and bucket.depends_on not in workspace.store:
            depends_on = f"[dim]{bucket.depends_on} (deleted)[/dim]"
        table.add_row(order, bucket.name, bucket.title, depends_on, str(len(bucket.files)))

    return table


def pool_table(workspace: Workspace) -> Table:
    """Changed files not assigned to any bucket."""
    table = Table(title=f"Unassigned ({POOL})")
    table.add_column("Path")
    table.add_column("Change")
    table.add_column("Size", justify="right")

    for ref in workspace.store.registry:
        size = "" if ref.size is None else str(ref.size)
        table.add_row(ref.path, str(ref.kind), size)

    return table
