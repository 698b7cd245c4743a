"""multipr init command - set up multipr for a repository."""

import click
from rich.table import Table

from multipr.commands._utils import console, print_error
from multipr.config import MultiPRConfig
from multipr.constants import CONFIG_FILE, HostKind
from multipr.exceptions import MultiPRError
from multipr.git.hosting import RepositoryContext
from multipr.git.ops import open_repository
from multipr.logging import get_logger
from multipr.workspace import ensure_state_dir

logger = get_logger("init")


@click.command()
@click.option("--base", "base_branch", default=None, help="Default base branch for new PRs")
@click.option("--remote", default=None, help="Remote that branches are pushed to")
@click.option("--cli/--no-cli", "use_hosting_cli", default=True, help="Create GitHub PRs through the gh CLI")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(base_branch: str | None, remote: str | None, use_hosting_cli: bool, force: bool) -> None:
    """Initialize multipr for the current repository.

    Creates .multipr/config.yaml.

    Examples:

        multipr init

        multipr init --base develop --no-cli
    """
    try:
        git = open_repository(".")
        config_path = git.repo_path / CONFIG_FILE

        if config_path.exists() and not force:
            console.print("[yellow]multipr already initialized.[/yellow]")
            console.print("Use [cyan]--force[/cyan] to reinitialize.")
            return

        config = MultiPRConfig()
        if base_branch:
            config.default_base_branch = base_branch
        if remote:
            config.remote = remote
        config.use_hosting_cli = use_hosting_cli

        ensure_state_dir(git.repo_path)
        config.save(config_path)
        logger.info(f"Wrote {config_path}")

        context = RepositoryContext.detect(git, config.remote)

        table = Table(title="multipr configuration", show_header=False)
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        table.add_row("Repository", str(git.repo_path))
        host = context.host_kind.label
        if context.host_kind is HostKind.UNKNOWN:
            host = "[yellow]unsupported[/yellow]"
        table.add_row("Host", host)
        table.add_row("Remote", f"{config.remote} ({context.remote_url or 'not configured'})")
        table.add_row("Default base", config.default_base_branch)
        table.add_row("Use gh CLI", "yes" if config.use_hosting_cli else "no")
        console.print(table)

        console.print(f"\n[green]✓[/green] Created {CONFIG_FILE}")
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None
