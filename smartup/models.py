"""Core data models for SmartUp."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class RiskTier(IntEnum):
    """Update risk, ordered from safest to least predictable."""

    PATCH = 0
    MINOR = 1
    PREMAJOR = 2
    MAJOR = 3
    INDETERMINATE = 4

    @property
    def label(self) -> str:
        return self.name.lower()


class Section(str, Enum):
    """Manifest section a dependency is declared in."""

    DIRECT = "dependencies"
    DEVELOPMENT = "devDependencies"


@dataclass(frozen=True)
class DependencyRecord:
    """A single dependency declared in the manifest."""

    name: str
    current_range: str
    section: Section


@dataclass(frozen=True)
class ResolvedCandidate:
    """Latest allowed version the resolver reports for a dependency."""

    name: str
    latest_allowed: str


@dataclass(frozen=True)
class UpdateCandidate:
    """A proposed update, classified and ready for selection."""

    name: str
    current_range: str
    proposed_version: str
    tier: RiskTier
    section: Section
    default_selected: bool = False
    source_url: str | None = None

    @property
    def display_url(self) -> str:
        if self.source_url:
            return self.source_url
        return f"https://www.npmjs.com/package/{self.name}"


@dataclass
class ManifestDocument:
    """A parsed package.json, kept with the formatting it was read with."""

    data: dict[str, Any]
    indent: str | int = 2
    trailing_newline: bool = True

    def section(self, section: Section) -> dict[str, str]:
        deps = self.data.get(section.value)
        if isinstance(deps, dict):
            return deps
        return {}


class InstallState(str, Enum):
    """States of the install orchestration."""

    IDLE = "idle"
    BACKUP_REQUESTED = "backup_requested"
    MUTATED = "mutated"
    INSTALLING = "installing"
    SUCCESS = "success"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"
    KEPT_DIRTY = "kept_dirty"


class RunOutcome(str, Enum):
    """How a full update run ended."""

    UP_TO_DATE = "up_to_date"
    CANCELLED = "cancelled"
    NOTHING_SELECTED = "nothing_selected"
    DRY_RUN = "dry_run"
    INSTALLED = "installed"
    ROLLED_BACK = "rolled_back"
    KEPT_DIRTY = "kept_dirty"


@dataclass
class RunReport:
    """Summary of an update run."""

    outcome: RunOutcome
    catalog: list[UpdateCandidate] = field(default_factory=list)
    selection: frozenset[str] = frozenset()
    install_state: InstallState | None = None
    backup_made: bool = False
