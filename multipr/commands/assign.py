"""multipr assign/unassign commands - move files between buckets and the pool."""

import click

from multipr.commands._utils import console, open_workspace, print_error
from multipr.constants import MoveOutcome
from multipr.exceptions import MultiPRError, UnknownFileError


@click.command()
@click.argument("bucket")
@click.argument("paths", nargs=-1, required=True)
@click.option("--prefix", "as_prefix", is_flag=True, help="Treat PATHS as prefixes of unassigned files")
def assign(bucket: str, paths: tuple[str, ...], as_prefix: bool) -> None:
    """Move changed files into BUCKET.

    Files can come from the unassigned pool or from another bucket.

    Examples:

        multipr assign api src/api/orders.py src/api/schemas.py

        multipr assign docs --prefix docs/
    """
    try:
        workspace = open_workspace()
        store = workspace.store
        store.get(bucket)

        targets = list(paths)
        if as_prefix:
            targets = [p for p in store.registry.paths() if any(p.startswith(prefix) for prefix in paths)]
            if not targets:
                raise UnknownFileError(", ".join(paths))

        moved = 0
        for path in targets:
            if store.move_file_to_bucket(path, bucket) is MoveOutcome.MOVED:
                moved += 1
            else:
                console.print(f"[dim]{path} is already in {bucket}[/dim]")

        workspace.save()
        console.print(f"[green]✓[/green] Moved {moved} files into {bucket}")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None


@click.command()
@click.argument("paths", nargs=-1, required=True)
def unassign(paths: tuple[str, ...]) -> None:
    """Move files out of their bucket back to the unassigned pool."""
    try:
        workspace = open_workspace()
        moved = 0
        for path in paths:
            if workspace.store.move_file_to_pool(path) is MoveOutcome.MOVED:
                moved += 1
        workspace.save()
        console.print(f"[green]✓[/green] Returned {moved} files to the unassigned pool")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None
