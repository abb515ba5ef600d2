"""CLI application for SmartUp."""

from pathlib import Path

import typer
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.shortcuts import checkboxlist_dialog
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from smartup.config import DEFAULT_REGISTRY, Settings
from smartup.detect import identify
from smartup.errors import SmartUpError
from smartup.log import configure_logging
from smartup.models import RiskTier, RunOutcome, RunReport, UpdateCandidate
from smartup.pipeline import run_update
from smartup.resolve_node import NpmResolver
from smartup.selection import default_selection

console = Console()

EXIT_INSTALL_FAILED = 3

BADGES = {
    RiskTier.PATCH: ("  PATCH  ", "black on green", "green"),
    RiskTier.MINOR: ("  MINOR  ", "black on yellow", "yellow"),
    RiskTier.PREMAJOR: (" PRE-MAJ ", "bold white on red", "red"),
    RiskTier.MAJOR: ("  MAJOR  ", "bold white on red", "red"),
    RiskTier.INDETERMINATE: ("  OTHER  ", "white on grey37", "grey50"),
}

PROMPT_STYLES = {
    RiskTier.PATCH: "fg:ansigreen",
    RiskTier.MINOR: "fg:ansiyellow",
    RiskTier.PREMAJOR: "fg:ansired bold",
    RiskTier.MAJOR: "fg:ansired bold",
    RiskTier.INDETERMINATE: "fg:ansigray",
}


def format_catalog_table(catalog: list[UpdateCandidate]) -> Table:
    """Render the candidate updates as a table, safest first."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Package")
    table.add_column("Risk")
    table.add_column("Change")
    table.add_column("Source", style="cyan underline")

    for candidate in catalog:
        badge, badge_style, colour = BADGES[candidate.tier]
        table.add_row(
            Text(candidate.name, style="bold"),
            Text(badge, style=badge_style),
            Text(f"{candidate.current_range} ➔ {candidate.proposed_version}", style=colour),
            candidate.display_url,
        )

    return table


def prompt_selection(catalog: list[UpdateCandidate]) -> list[str] | None:
    """Ask which packages to update. Returns None if the user cancels."""
    values = [
        (
            candidate.name,
            FormattedText([
                ("bold", candidate.name.ljust(25)),
                (PROMPT_STYLES[candidate.tier], f" {candidate.tier.label:<13} "),
                ("", f"{candidate.current_range} ➔ {candidate.proposed_version}"),
            ]),
        )
        for candidate in catalog
    ]
    defaults = default_selection(catalog)

    try:
        return checkboxlist_dialog(
            title="SmartUp",
            text="Packages to update (Space to toggle, Tab to move to Ok):",
            values=values,
            default_values=[c.name for c in catalog if c.name in defaults],
        ).run()
    except (KeyboardInterrupt, EOFError):
        return None


def confirm_restore() -> bool | None:
    """Ask whether to restore package.json. Returns None if aborted."""
    try:
        return typer.confirm(
            "Installation failed. Do you want to restore the old package.json?",
            default=True,
        )
    except typer.Abort:
        return None


def print_report(report: RunReport) -> None:
    """Print the outcome of a run."""
    outcome = report.outcome

    if outcome is RunOutcome.UP_TO_DATE:
        console.print(Panel("✅  Everything is up-to-date!", border_style="green"))
    elif outcome is RunOutcome.CANCELLED:
        console.print(Panel("👋 Bye! See you later.", border_style="yellow"))
    elif outcome is RunOutcome.NOTHING_SELECTED:
        console.print("No updates selected. Exiting.", style="yellow")
    elif outcome is RunOutcome.DRY_RUN:
        console.print(Panel("ℹ️  SIMULATION MODE (DRY RUN)", border_style="blue"))
        console.print("The following packages would have been updated:", style="dim")
        for candidate in report.catalog:
            if candidate.name in report.selection:
                console.print(f" - {candidate.name} @ {candidate.proposed_version}", markup=False)
    elif outcome is RunOutcome.INSTALLED:
        console.print(Panel(
            f"🚀 Updated {len(report.selection)} packages successfully!",
            border_style="green",
        ))
    elif outcome is RunOutcome.ROLLED_BACK:
        console.print("↺ package.json restored from backup.", style="yellow")
    elif outcome is RunOutcome.KEPT_DIRTY:
        console.print("Modified package.json kept.", style="yellow")
        if report.backup_made:
            console.print("The previous version is still available as package.json.bak.", style="dim")


app = typer.Typer(
    name="smartup",
    help="SmartUp - Interactively update package.json dependencies by risk",
    add_completion=False,
)


@app.command()
def update(
    project_dir: Path = typer.Argument(Path("."), help="Directory containing package.json"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-d", envvar="SMARTUP_DRY_RUN",
        help="Simulate the process without writing changes",
    ),
    backup: bool = typer.Option(
        True, "--backup/--no-backup", envvar="SMARTUP_BACKUP",
        help="Back up package.json before writing",
    ),
    restore_on_cancel: bool = typer.Option(
        False, "--restore-on-cancel", envvar="SMARTUP_RESTORE_ON_CANCEL",
        help="Restore the backup if the restore question is aborted",
    ),
    registry: str = typer.Option(
        DEFAULT_REGISTRY, "--registry", envvar="SMARTUP_REGISTRY", help="npm registry URL",
    ),
    timeout: float = typer.Option(30.0, "--timeout", envvar="SMARTUP_TIMEOUT", help="Request timeout in seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_level: str | None = typer.Option(None, "--log-level", envvar="SMARTUP_LOG_LEVEL", help="Logging level"),
) -> None:
    """SmartUp - Pick which dependency updates to apply, safest first."""
    configure_logging(verbose=verbose, log_level=log_level)

    settings = Settings(
        project_dir=project_dir,
        backup=backup,
        dry_run=dry_run,
        restore_on_cancel=restore_on_cancel,
        registry_url=registry,
        timeout=timeout,
    )

    def select(catalog: list[UpdateCandidate]) -> list[str] | None:
        console.print(format_catalog_table(catalog))
        return prompt_selection(catalog)

    try:
        if not settings.manifest_path.is_file():
            console.print(f"Error: No package.json file found in {project_dir}", style="red", markup=False)
            raise typer.Exit(1)

        console.print(f"[bold]Package Manager:[/bold] [magenta]{identify(project_dir)}[/magenta]")

        resolver = NpmResolver(
            registry_url=settings.registry_url,
            timeout=settings.timeout,
            max_concurrency=settings.max_concurrency,
        )
        console.print("Analyzing dependencies...", style="dim")
        report = run_update(
            settings,
            select=select,
            confirm_restore=confirm_restore,
            resolver=resolver,
        )

        print_report(report)
        if report.outcome in (RunOutcome.ROLLED_BACK, RunOutcome.KEPT_DIRTY):
            raise typer.Exit(EXIT_INSTALL_FAILED)

    except typer.Exit:
        raise
    except SmartUpError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)
    except Exception as e:
        console.print("❌ Critical Error", style="bold red")
        console.print(repr(e), style="red", markup=False)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
