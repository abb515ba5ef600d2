"""Run settings for SmartUp."""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_REGISTRY = "https://registry.npmjs.org"
MANIFEST_NAME = "package.json"
BACKUP_SUFFIX = ".bak"


@dataclass(frozen=True)
class Settings:
    """Options controlling one update run."""

    project_dir: Path = field(default_factory=Path.cwd)
    manifest_name: str = MANIFEST_NAME
    backup: bool = True
    dry_run: bool = False
    # Answer used when the restore question itself is aborted.
    restore_on_cancel: bool = False
    registry_url: str = DEFAULT_REGISTRY
    timeout: float = 30.0
    max_concurrency: int = 6

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / self.manifest_name

    @property
    def backup_path(self) -> Path:
        return self.project_dir / (self.manifest_name + BACKUP_SUFFIX)
