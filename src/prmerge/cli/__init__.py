"""
prmerge CLI - Main application entry point.

    prmerge [OPTIONS] FOLDER BRANCH

Merges the open pull requests of the GitHub repository behind FOLDER onto a
new local BRANCH.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from prmerge import __version__
from prmerge.cli.errors import ExitCode, err_console, print_error, report_error
from prmerge.core.config import load_config, load_layered_env
from prmerge.core.errors import MergeConflictError, PrMergeError
from prmerge.core.git import format_command
from prmerge.core.github.models import RepoInfo
from prmerge.core.service import IntegrationReport, IntegrationService

app = typer.Typer(
    name="prmerge",
    help="Merge open pull requests onto a new local branch",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for a run.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def echo_command(cmd: list[str]) -> None:
    err_console.print(f"=> {format_command(cmd)}", style="dim", markup=False, highlight=False)


class ConsoleReporter:
    """Prints run progress and remembers which stage the run reached."""

    def __init__(self) -> None:
        self.stage = "setup"

    def headline(self) -> str:
        """Headline for a fatal error at the current stage."""
        return {
            "setup": "Invalid setup.",
            "folder": "Unable to change directory.",
            "repository": "Unable to find GitHub repository.",
            "discovery": "Unable to query for open Pull Requests.",
            "branch": "Unable to create a new branch.",
            "merge": "Unable to merge pull requests.",
        }[self.stage]

    def on_folder(self, folder: Path) -> None:
        console.print(f"Using local directory:   '{folder}'")
        self.stage = "repository"

    def on_repository(self, repo: RepoInfo) -> None:
        console.print(f"Found GitHub repository: [bold]'{repo.full_name}'[/bold]")
        self.stage = "discovery"

    def on_discovered(self, numbers: list[int], label: Optional[str]) -> None:
        suffix = f" with label '{label}'" if label is not None else ""
        console.print(f"Found {len(numbers)} open PR(s){suffix}.")
        self.stage = "branch"

    def on_branch_ready(self, name: str) -> None:
        console.print(f"Created and switched to new branch '{name}'.")
        self.stage = "merge"

    def on_start(self, pr_number: int) -> None:
        console.print(f"[dim]Merging PR #{pr_number}...[/dim]")

    def on_merged(self, pr_number: int) -> None:
        console.print(f"[green]✓[/green] PR #{pr_number} merged")

    def on_failed(self, pr_number: int, error: MergeConflictError) -> None:
        console.print(f"[red]✗[/red] PR #{pr_number} failed to merge, merge aborted")


def print_summary(report: IntegrationReport) -> None:
    """Print merged (and, in continue mode, failed) counts."""
    outcome = report.outcome
    console.print()
    console.print(f"Merged {len(outcome.merged)} PR(s) onto the '{report.branch}' branch.")
    if report.continue_on_failure:
        if outcome.failed:
            failed = ", ".join(f"#{n}" for n in outcome.failed)
            console.print(f"[yellow]Failed to merge {len(outcome.failed)} PR(s):[/yellow] {failed}")
        else:
            console.print("Failed to merge 0 PR(s).")
    if outcome.pending:
        pending = ", ".join(f"#{n}" for n in outcome.pending)
        console.print(f"[dim]Not attempted: {pending}[/dim]")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"prmerge version {__version__}")
        raise typer.Exit()


@app.command()
def main(
    folder: Annotated[
        Path,
        typer.Argument(help="Local folder the git repository can be found in"),
    ],
    branch: Annotated[
        str,
        typer.Argument(help="Name of new branch to create locally. Any existing branch is overwritten"),
    ],
    auth: Annotated[
        Optional[str],
        typer.Option(
            "--auth",
            help='GitHub API credentials as "user:password"; password may be a personal access token',
        ),
    ] = None,
    remote: Annotated[
        Optional[str],
        typer.Option("--remote", help="git remote used for communication with GitHub [default: origin]"),
    ] = None,
    base: Annotated[
        Optional[str],
        typer.Option("--base", help="Base branch to start from [default: master]"),
    ] = None,
    label: Annotated[
        Optional[str],
        typer.Option("--label", help="Only merge pull requests with this label"),
    ] = None,
    trusted_only: Annotated[
        bool,
        typer.Option(
            "--trusted-only",
            help="With --label, only merge PRs whose author has push access",
        ),
    ] = False,
    continue_on_failure: Annotated[
        bool,
        typer.Option(
            "--continue-on-failure",
            help="Skip pull requests that fail to merge instead of stopping",
        ),
    ] = False,
    max_pages: Annotated[
        Optional[int],
        typer.Option("--max-pages", help="Maximum API pages fetched per request [default: 100]"),
    ] = None,
    api_url: Annotated[
        Optional[str],
        typer.Option("--api-url", help="GitHub API base URL (for GitHub Enterprise)"),
    ] = None,
    http_timeout: Annotated[
        Optional[float],
        typer.Option("--http-timeout", help="Seconds before an API request times out"),
    ] = None,
    git_timeout: Annotated[
        Optional[float],
        typer.Option("--git-timeout", help="Seconds before a git command is killed"),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Hide git command output"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug output with detailed logging"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """
    Merge open pull requests onto a new local branch.

    The branch is created from REMOTE/BASE, then every open PR targeting BASE
    is fetched and merged with the "ours" strategy, lowest number first.

    Examples:

        # Merge every open PR against master
        prmerge ~/src/project integration

        # Only PRs labelled "ready" by authors with push access
        prmerge ~/src/project integration --label ready --trusted-only

        # Keep going when a PR does not merge
        prmerge ~/src/project integration --base main --continue-on-failure
    """
    setup_logging(debug)
    reporter = ConsoleReporter()

    try:
        load_layered_env(project_dir=folder)
        config = load_config(
            folder,
            branch,
            overrides={
                "auth": auth,
                "remote": remote,
                "base": base,
                "label": label,
                "trusted_only": trusted_only or None,
                "continue_on_failure": continue_on_failure or None,
                "max_pages": max_pages,
                "api_url": api_url,
                "http_timeout": http_timeout,
                "git_timeout": git_timeout,
                "quiet": quiet or None,
            },
        )
        reporter.stage = "folder"

        service = IntegrationService(config, callback=reporter, on_command=echo_command)
        report = service.run()
    except PrMergeError as e:
        report_error(e, reporter.headline())
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except KeyboardInterrupt:
        print_error(
            "Interrupted",
            reason="The working tree may be left mid-merge; check 'git status' before re-running.",
        )
        raise typer.Exit(ExitCode.SIGINT)

    print_summary(report)

    if report.outcome.fatal_error is not None:
        report_error(report.outcome.fatal_error, reporter.headline())
        raise typer.Exit(ExitCode.GENERAL_ERROR)


__all__ = ["app", "main"]
