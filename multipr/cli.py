"""multipr command-line interface."""

import click

from multipr import __version__
from multipr.commands import (
    assign,
    bucket_group,
    init,
    process,
    refresh,
    status,
    unassign,
)
from multipr.logging import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="multipr")
@click.option("--verbose", "-v", is_flag=True, help="Show info-level log messages")
@click.option("--debug", is_flag=True, help="Show debug-level log messages")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """multipr - split a working tree into stacked pull requests.

    Group changed files into buckets, then create one branch and one PR
    per bucket.
    """
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = "debug" if debug else "info" if verbose else None
    if ctx.obj["log_level"]:
        setup_logging(level=ctx.obj["log_level"], json_output=False)


# Register implemented commands
cli.add_command(init)
cli.add_command(status)
cli.add_command(refresh)
cli.add_command(bucket_group, name="bucket")
cli.add_command(assign)
cli.add_command(unassign)
cli.add_command(process)


if __name__ == "__main__":
    cli()
