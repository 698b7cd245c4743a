"""multipr process command - turn buckets into branches and PRs."""

import click
from rich.markdown import Markdown
from rich.prompt import Confirm
from rich.table import Table

from multipr.commands._utils import console, open_workspace, print_error
from multipr.exceptions import MultiPRError, ToolingUnavailableError
from multipr.logging import get_logger
from multipr.preview import render_plan_preview
from multipr.reporter import OutcomeReport

logger = get_logger("process")


def results_table(report: OutcomeReport) -> Table:
    table = Table(title="Results")
    table.add_column("Bucket", style="cyan")
    table.add_column("Branch")
    table.add_column("Base")
    table.add_column("Result")

    for result in report.successes:
        outcome = f"[yellow]open to create:[/yellow] {result.url}" if result.manual else f"[green]{result.url}[/green]"
        table.add_row(result.bucket_name, result.branch_name or "", result.base_branch or "", outcome)
    for result in report.failures:
        table.add_row(
            result.bucket_name,
            result.branch_name or "-",
            result.base_branch or "",
            f"[red]{result.error}[/red]",
        )
    return table


@click.command()
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.option("--manual", is_flag=True, help="Only push branches and print PR URLs")
@click.option("--base", "base_branch", default=None, help="Override the default base branch")
def process(yes: bool, manual: bool, base_branch: str | None) -> None:
    """Create a branch and a PR for every bucket with files.

    Buckets are processed in dependency order. A bucket that depends on
    another is branched from that bucket's new branch.

    Examples:

        multipr process

        multipr process --manual --base develop
    """
    try:
        workspace = open_workspace()
        eligible = workspace.store.eligible()
        if not eligible:
            console.print("[yellow]No buckets with files to process.[/yellow] Create buckets and add files first.")
            return

        orchestrator = workspace.orchestrator()
        use_automation = workspace.config.use_hosting_cli and not manual

        try:
            automated = orchestrator.preflight(use_automation)
        except ToolingUnavailableError as e:
            print_error(e)
            if yes or not Confirm.ask("Continue with manual PR creation?", default=True):
                raise SystemExit(1) from None
            automated = False

        default_base = base_branch or workspace.config.default_base_branch
        console.print(Markdown(render_plan_preview(eligible, workspace.context.host_kind, default_base)))

        if not yes and not Confirm.ask(f"Ready to create {len(eligible)} PRs. Proceed?", default=True):
            console.print("[dim]Cancelled[/dim]")
            return

        report = workspace.run(orchestrator, use_automation=automated, base_branch=default_base)

        console.print(results_table(report))
        summary = report.summary(workspace.context.host_kind.label, automated)
        style = "green" if report.success_count and not report.failure_count else "yellow"
        if not report.success_count:
            style = "red"
        console.print(f"[{style}]{summary}[/{style}]")

        if report.failure_count:
            raise SystemExit(1)
    except MultiPRError as e:
        print_error(e)
        raise SystemExit(1) from None
