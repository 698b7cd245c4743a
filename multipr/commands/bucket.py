"""multipr bucket commands - create, edit and inspect buckets."""

import click
from rich.markdown import Markdown
from rich.prompt import Prompt

from multipr.commands._utils import bucket_table, console, open_workspace, print_error
from multipr.exceptions import MultiPRError
from multipr.logging import get_logger
from multipr.preview import render_bucket_preview

logger = get_logger("bucket")


@click.group("bucket")
def bucket_group() -> None:
    """Manage buckets of changed files."""


@bucket_group.command("create")
@click.argument("name")
@click.option("--title", "-t", default=None, help="PR title (prompted if omitted)")
@click.option("--description", "-d", default="", help="PR description")
def create_bucket(name: str, title: str | None, description: str) -> None:
    """Create an empty bucket.

    Examples:

        multipr bucket create api --title "Add orders endpoint"
    """
    try:
        workspace = open_workspace()
        if title is None:
            title = Prompt.ask("PR title")
        bucket = workspace.store.create(name, title, description)
        workspace.save()
        console.print(f"[green]✓[/green] Created bucket: {bucket.name}")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None


@bucket_group.command("delete")
@click.argument("name")
def delete_bucket(name: str) -> None:
    """Delete a bucket and return its files to the unassigned pool."""
    try:
        workspace = open_workspace()
        returned = workspace.store.delete(name)
        workspace.save()
        console.print(f"[green]✓[/green] Deleted bucket: {name}")
        if returned:
            console.print(f"[dim]{len(returned)} files returned to the unassigned pool[/dim]")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None


@bucket_group.command("rename")
@click.argument("old")
@click.argument("new")
def rename_bucket(old: str, new: str) -> None:
    """Rename a bucket, keeping dependencies on it."""
    try:
        workspace = open_workspace()
        workspace.store.rename(old, new)
        workspace.save()
        console.print(f"[green]✓[/green] Renamed bucket {old} to {new}")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None


@bucket_group.command("depend")
@click.argument("name")
@click.option("--on", "depends_on", default=None, help="Bucket that must be processed first")
@click.option("--none", "clear", is_flag=True, help="Remove the dependency")
def depend_bucket(name: str, depends_on: str | None, clear: bool) -> None:
    """Make a bucket's PR stack on another bucket's branch.

    Examples:

        multipr bucket depend ui --on api

        multipr bucket depend ui --none
    """
    if clear == (depends_on is not None):
        raise click.UsageError("Pass exactly one of --on BUCKET or --none")

    try:
        workspace = open_workspace()
        update = workspace.store.set_dependency(name, None if clear else depends_on)
        workspace.save()

        if not update.applied:
            console.print(f"[yellow]⚠[/yellow] {update.warning}")
            return
        if update.depends_on:
            console.print(f"[green]✓[/green] {name} now depends on {update.depends_on}")
        else:
            console.print(f"[green]✓[/green] Removed dependency from {name}")
        for edge in update.broken:
            console.print(f"[yellow]⚠[/yellow] Removed dependency of {edge.bucket} on {edge.depends_on}")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None


@bucket_group.command("preview")
@click.argument("name")
def preview_bucket(name: str) -> None:
    """Show what one bucket's commit and PR will contain."""
    try:
        workspace = open_workspace()
        bucket = workspace.store.get(name)
        text = render_bucket_preview(
            bucket,
            workspace.store.eligible(),
            workspace.config.default_base_branch,
        )
        console.print(Markdown(text))
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None


@bucket_group.command("list")
def list_buckets() -> None:
    """List buckets in processing order."""
    try:
        workspace = open_workspace()
        if not len(workspace.store):
            console.print("[dim]No buckets.[/dim]")
            return
        console.print(bucket_table(workspace))
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None
