"""End-to-end update run: resolve, classify, select, install."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from functools import partial

from .catalog import build_catalog, lookup_source_url
from .config import Settings
from .detect import identify, install_command
from .install import ConfirmRestore, InstallOrchestrator, RunInstall, run_install
from .models import InstallState, RunOutcome, RunReport, UpdateCandidate
from .parse_node import dependency_records, read_manifest
from .resolve_node import NpmResolver
from .selection import validate_selection

logger = logging.getLogger(__name__)

# Returns the confirmed names, or None when the user aborted the prompt.
SelectUpdates = Callable[[list[UpdateCandidate]], Iterable[str] | None]

_FINAL_OUTCOMES = {
    InstallState.SUCCESS: RunOutcome.INSTALLED,
    InstallState.ROLLED_BACK: RunOutcome.ROLLED_BACK,
    InstallState.KEPT_DIRTY: RunOutcome.KEPT_DIRTY,
}


def run_update(
    settings: Settings,
    select: SelectUpdates,
    confirm_restore: ConfirmRestore,
    resolver: NpmResolver | None = None,
    command: list[str] | None = None,
    run_install: RunInstall = run_install,
) -> RunReport:
    """Run one interactive update of the project in ``settings.project_dir``.

    The manifest is read once; that snapshot feeds resolution, the catalog
    and the mutation. Nothing is written unless the user confirms a
    non-empty selection outside of dry-run mode.

    Args:
        settings: Run settings
        select: Interactive selection over the ordered catalog
        confirm_restore: Asked whether to restore the backup after a failed install
        resolver: Registry resolver; built from ``settings`` when omitted
        command: Install command; detected from lock files when omitted
        run_install: Runs the install command and returns its exit status

    Returns:
        Report describing how the run ended

    Raises:
        ManifestError: If package.json is missing or invalid
        ResolutionError: If the registry query fails
    """
    document = read_manifest(settings.manifest_path)
    records = dependency_records(document)

    if resolver is None:
        resolver = NpmResolver(
            registry_url=settings.registry_url,
            timeout=settings.timeout,
            max_concurrency=settings.max_concurrency,
        )

    resolved = asyncio.run(resolver.resolve(records))
    catalog = build_catalog(
        records,
        resolved,
        url_lookup=partial(lookup_source_url, project_dir=settings.project_dir),
    )

    if not catalog:
        logger.info("All %d dependencies are up to date", len(records))
        return RunReport(outcome=RunOutcome.UP_TO_DATE)

    answer = select(catalog)
    if answer is None:
        return RunReport(outcome=RunOutcome.CANCELLED, catalog=catalog)

    selection = validate_selection(answer, catalog)
    if not selection:
        return RunReport(outcome=RunOutcome.NOTHING_SELECTED, catalog=catalog)

    if settings.dry_run:
        return RunReport(outcome=RunOutcome.DRY_RUN, catalog=catalog, selection=selection)

    if command is None:
        command = install_command(identify(settings.project_dir))

    orchestrator = InstallOrchestrator(
        settings,
        command,
        confirm_restore=confirm_restore,
        run_install=run_install,
    )
    state = orchestrator.run(document, selection, catalog)

    return RunReport(
        outcome=_FINAL_OUTCOMES[state],
        catalog=catalog,
        selection=selection,
        install_state=state,
        backup_made=orchestrator.backup_made,
    )
