"""multipr status command - show buckets and unassigned files."""

import json

import click
from rich.panel import Panel

from multipr.commands._utils import bucket_table, console, open_workspace, pool_table, print_error
from multipr.exceptions import MultiPRError
from multipr.workspace import Workspace


def status_payload(workspace: Workspace) -> dict:
    """Machine-readable snapshot of the workspace."""
    return {
        "repository": {
            "root": str(workspace.root),
            "host": str(workspace.context.host_kind),
            "web_url": workspace.context.web_url,
            "current_branch": workspace.git.current_branch(),
            "default_base_branch": workspace.config.default_base_branch,
        },
        "buckets": [
            {
                "name": b.name,
                "title": b.title,
                "description": b.description,
                "depends_on": b.depends_on,
                "order": b.order,
                "files": [{"path": ref.path, "kind": str(ref.kind)} for ref in b.files.values()],
            }
            for b in workspace.store.list_ordered()
        ],
        "unassigned": [{"path": ref.path, "kind": str(ref.kind)} for ref in workspace.store.registry],
    }


@click.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def status(json_output: bool) -> None:
    """Show buckets in processing order and unassigned changes.

    Examples:

        multipr status

        multipr status --json
    """
    try:
        workspace = open_workspace()

        if json_output:
            click.echo(json.dumps(status_payload(workspace), indent=2))
            return

        context = workspace.context
        console.print(
            Panel(
                f"[bold]{workspace.root.name}[/bold] on [cyan]{workspace.git.current_branch()}[/cyan]\n"
                f"Host: {context.host_kind.label}  Base: {workspace.config.default_base_branch}",
                title="multipr",
            )
        )

        if len(workspace.store):
            console.print(bucket_table(workspace))
        else:
            console.print("[dim]No buckets yet. Create one with 'multipr bucket create'.[/dim]")

        if len(workspace.store.registry):
            console.print(pool_table(workspace))
        else:
            console.print("[dim]No unassigned changes.[/dim]")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None
