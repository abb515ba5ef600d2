"""Backup, manifest write, install and rollback sequencing."""

import logging
import shutil
import subprocess
from collections.abc import Callable, Iterable
from pathlib import Path

from .config import Settings
from .models import InstallState, ManifestDocument, UpdateCandidate
from .mutate import apply_updates
from .parse_node import write_manifest

logger = logging.getLogger(__name__)

# Returns True to restore, False to keep, None when the question was aborted.
ConfirmRestore = Callable[[], bool | None]
RunInstall = Callable[[list[str], Path], int]
WriteManifest = Callable[[ManifestDocument, Path], None]


def run_install(command: list[str], cwd: Path) -> int:
    """Run the install command with the caller's terminal streams.

    Args:
        command: Install command line
        cwd: Project directory

    Returns:
        Process exit status; 127 if the command could not be started
    """
    logger.info("Running %s in %s", " ".join(command), cwd)
    try:
        return subprocess.run(command, cwd=cwd, check=False).returncode
    except OSError as e:
        logger.error("Could not start %s: %s", command[0], e)
        return 127


class InstallOrchestrator:
    """Apply a confirmed selection and install it, rolling back on request.

    States move ``IDLE -> BACKUP_REQUESTED -> MUTATED -> INSTALLING`` and end
    in ``SUCCESS``, ``ROLLED_BACK`` or ``KEPT_DIRTY``; ``FAILED`` is passed
    through when the install command fails. Every state entered is recorded
    in ``history``.
    """

    def __init__(
        self,
        settings: Settings,
        command: list[str],
        confirm_restore: ConfirmRestore,
        run_install: RunInstall = run_install,
        write_manifest: WriteManifest = write_manifest,
    ):
        self.settings = settings
        self.command = command
        self.confirm_restore = confirm_restore
        self.run_install = run_install
        self.write_manifest = write_manifest
        self.state = InstallState.IDLE
        self.history: list[InstallState] = [InstallState.IDLE]
        self.backup_made = False

    def _enter(self, state: InstallState) -> None:
        logger.debug("Install state %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def backup(self) -> bool:
        """Copy the manifest next to itself. Failure is logged, not raised."""
        self._enter(InstallState.BACKUP_REQUESTED)
        try:
            shutil.copyfile(self.settings.manifest_path, self.settings.backup_path)
        except OSError as e:
            logger.warning("Could not create backup %s: %s", self.settings.backup_path, e)
            return False
        self.backup_made = True
        return True

    def _remove_backup(self) -> None:
        try:
            self.settings.backup_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove backup %s: %s", self.settings.backup_path, e)

    def restore(self) -> bool:
        """Copy the backup over the manifest and delete the backup."""
        try:
            shutil.copyfile(self.settings.backup_path, self.settings.manifest_path)
        except OSError as e:
            logger.error("Failed to restore %s from backup: %s", self.settings.manifest_path, e)
            return False
        self._remove_backup()
        return True

    def _decide_restore(self) -> bool:
        answer = self.confirm_restore()
        if answer is None:
            logger.info(
                "Restore question aborted, defaulting to %s",
                "restore" if self.settings.restore_on_cancel else "keep",
            )
            return self.settings.restore_on_cancel
        return answer

    def run(
        self,
        document: ManifestDocument,
        selection: Iterable[str],
        catalog: list[UpdateCandidate],
    ) -> InstallState:
        """Write the selected updates and run the install command.

        Args:
            document: Manifest snapshot read at the start of the run
            selection: Confirmed package names
            catalog: Candidates the selection was made from

        Returns:
            Final state: SUCCESS, ROLLED_BACK or KEPT_DIRTY
        """
        if self.state is not InstallState.IDLE:
            raise RuntimeError(f"Orchestrator already ran (state {self.state.value})")

        # Mutation errors abort before anything is written.
        updated = apply_updates(document, selection, catalog)

        if self.settings.backup:
            self.backup()

        try:
            self.write_manifest(updated, self.settings.manifest_path)
        except Exception:
            # The manifest was not replaced, so the backup is not needed.
            if self.backup_made:
                self._remove_backup()
                self.backup_made = False
            raise
        self._enter(InstallState.MUTATED)

        self._enter(InstallState.INSTALLING)
        status = self.run_install(self.command, self.settings.project_dir)

        if status == 0:
            if self.backup_made:
                self._remove_backup()
            self._enter(InstallState.SUCCESS)
            return self.state

        logger.error("%s exited with status %s", " ".join(self.command), status)
        self._enter(InstallState.FAILED)

        if not self.backup_made:
            logger.warning("No backup available, keeping modified %s", self.settings.manifest_name)
            self._enter(InstallState.KEPT_DIRTY)
        elif self._decide_restore() and self.restore():
            self._enter(InstallState.ROLLED_BACK)
        else:
            self._enter(InstallState.KEPT_DIRTY)

        return self.state
