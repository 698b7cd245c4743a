"""multipr refresh command - reload changed files from git."""

import click

from multipr.commands._utils import console, open_workspace, print_error
from multipr.exceptions import MultiPRError


@click.command()
def refresh() -> None:
    """Reload changed files from the working tree."""
    try:
        workspace = open_workspace()
        count = workspace.refresh()
        workspace.save()
        console.print(f"[green]✓[/green] Git changes refreshed: {count} unassigned files")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None
