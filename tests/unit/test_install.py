"""Tests for install orchestration and rollback."""

from unittest.mock import MagicMock, patch

import pytest

from smartup.catalog import build_catalog
from smartup.config import Settings
from smartup.errors import SelectionError
from smartup.install import InstallOrchestrator, run_install
from smartup.models import InstallState
from smartup.parse_node import dependency_records, read_manifest

S = InstallState


class TestInstallOrchestrator:
    """Test the backup -> write -> install -> rollback sequence."""

    @pytest.fixture(autouse=True)
    def setup(self, project_dir, sample_package_json):
        self.original = sample_package_json
        self.manifest = project_dir / "package.json"
        self.backup = project_dir / "package.json.bak"
        self.document = read_manifest(self.manifest)
        self.catalog = build_catalog(
            dependency_records(self.document),
            {"left-pad": "^1.3.0", "express": "^5.0.0"},
        )
        self.settings = Settings(project_dir=project_dir)

    def orchestrator(self, status=0, answer=True, **settings):
        settings = Settings(project_dir=self.settings.project_dir, **settings) if settings else self.settings
        self.install = MagicMock(return_value=status)
        self.confirm = MagicMock(return_value=answer)
        return InstallOrchestrator(
            settings,
            ["npm", "install"],
            confirm_restore=self.confirm,
            run_install=self.install,
        )

    def test_success_removes_backup(self):
        orchestrator = self.orchestrator(status=0)

        state = orchestrator.run(self.document, ["left-pad"], self.catalog)

        assert state is S.SUCCESS
        assert orchestrator.history == [S.IDLE, S.BACKUP_REQUESTED, S.MUTATED, S.INSTALLING, S.SUCCESS]
        assert '"left-pad": "^1.3.0"' in self.manifest.read_text()
        assert not self.backup.exists()
        self.install.assert_called_once_with(["npm", "install"], self.settings.project_dir)
        self.confirm.assert_not_called()

    def test_backup_holds_original_during_install(self):
        seen = {}

        def install(command, cwd):
            seen["backup"] = self.backup.read_text()
            seen["manifest"] = self.manifest.read_text()
            return 0

        orchestrator = self.orchestrator()
        orchestrator.run_install = install
        orchestrator.run(self.document, ["express"], self.catalog)

        assert seen["backup"] == self.original
        assert '"express": "^5.0.0"' in seen["manifest"]

    def test_failure_restore_confirmed(self):
        orchestrator = self.orchestrator(status=1, answer=True)

        state = orchestrator.run(self.document, ["left-pad"], self.catalog)

        assert state is S.ROLLED_BACK
        assert S.FAILED in orchestrator.history
        assert self.manifest.read_text() == self.original
        assert not self.backup.exists()

    def test_failure_restore_declined_keeps_dirty(self):
        orchestrator = self.orchestrator(status=1, answer=False)

        state = orchestrator.run(self.document, ["left-pad"], self.catalog)

        assert state is S.KEPT_DIRTY
        assert '"left-pad": "^1.3.0"' in self.manifest.read_text()
        assert self.backup.read_text() == self.original

    def test_aborted_question_defaults_to_keep(self):
        orchestrator = self.orchestrator(status=1, answer=None)

        assert orchestrator.run(self.document, ["left-pad"], self.catalog) is S.KEPT_DIRTY
        assert self.backup.exists()

    def test_aborted_question_can_default_to_restore(self):
        orchestrator = self.orchestrator(status=1, answer=None, restore_on_cancel=True)

        assert orchestrator.run(self.document, ["left-pad"], self.catalog) is S.ROLLED_BACK
        assert self.manifest.read_text() == self.original

    def test_no_backup_when_disabled(self):
        orchestrator = self.orchestrator(status=0, backup=False)

        state = orchestrator.run(self.document, ["left-pad"], self.catalog)

        assert state is S.SUCCESS
        assert S.BACKUP_REQUESTED not in orchestrator.history
        assert orchestrator.backup_made is False

    def test_failure_without_backup_keeps_dirty_without_asking(self):
        orchestrator = self.orchestrator(status=1, backup=False)

        assert orchestrator.run(self.document, ["left-pad"], self.catalog) is S.KEPT_DIRTY
        self.confirm.assert_not_called()

    def test_backup_failure_is_not_fatal(self):
        orchestrator = self.orchestrator(status=0)

        with patch("smartup.install.shutil.copyfile", side_effect=OSError("disk full")):
            state = orchestrator.run(self.document, ["left-pad"], self.catalog)

        assert state is S.SUCCESS
        assert orchestrator.backup_made is False
        assert '"left-pad": "^1.3.0"' in self.manifest.read_text()

    def test_invalid_selection_writes_nothing(self):
        orchestrator = self.orchestrator()

        with pytest.raises(SelectionError):
            orchestrator.run(self.document, ["react"], self.catalog)

        assert self.manifest.read_text() == self.original
        assert not self.backup.exists()
        self.install.assert_not_called()

    def test_write_failure_removes_backup(self):
        orchestrator = self.orchestrator()
        orchestrator.write_manifest = MagicMock(side_effect=PermissionError("read-only"))

        with pytest.raises(PermissionError):
            orchestrator.run(self.document, ["left-pad"], self.catalog)

        assert not self.backup.exists()
        assert orchestrator.backup_made is False
        assert self.manifest.read_text() == self.original
        assert S.MUTATED not in orchestrator.history
        self.install.assert_not_called()

    def test_runs_only_once(self):
        orchestrator = self.orchestrator()
        orchestrator.run(self.document, ["left-pad"], self.catalog)

        with pytest.raises(RuntimeError):
            orchestrator.run(self.document, ["left-pad"], self.catalog)


class TestRunInstall:
    """Test the install subprocess wrapper."""

    def test_returns_exit_status(self, tmp_path):
        with patch("smartup.install.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=2)

            assert run_install(["npm", "install"], tmp_path) == 2
            mock_run.assert_called_once_with(["npm", "install"], cwd=tmp_path, check=False)

    def test_missing_executable(self, tmp_path):
        with patch("smartup.install.subprocess.run", side_effect=FileNotFoundError("npm")):
            assert run_install(["npm", "install"], tmp_path) == 127
