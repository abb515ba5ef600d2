"""Build the ordered catalog of candidate updates."""

import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path

from .classify import classify
from .models import DependencyRecord, UpdateCandidate
from .selection import is_default_selected

logger = logging.getLogger(__name__)

UNKNOWN_CURRENT = "0.0.0"

UrlLookup = Callable[[str], str | None]


def lookup_source_url(name: str, project_dir: Path) -> str | None:
    """Find a package's homepage or repository from its installed metadata.

    Args:
        name: Package name
        project_dir: Directory containing node_modules

    Returns:
        Cleaned URL, or None if the package is not installed or declares none
    """
    pkg_path = project_dir / "node_modules" / name / "package.json"
    if not pkg_path.is_file():
        return None

    try:
        pkg = json.loads(pkg_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug("Could not read %s: %s", pkg_path, e)
        return None

    if not isinstance(pkg, dict):
        return None

    repository = pkg.get("repository")
    url = pkg.get("homepage")
    if not url and isinstance(repository, dict):
        url = repository.get("url")
    if not url:
        url = repository

    if not isinstance(url, str) or not url:
        return None

    url = url.removeprefix("git+")
    return url.removesuffix(".git")


def build_catalog(
    records: tuple[DependencyRecord, ...],
    resolved: Mapping[str, str],
    url_lookup: UrlLookup | None = None,
) -> list[UpdateCandidate]:
    """Classify every resolved update and order the result by risk.

    The resolver's report order is kept within a tier.

    Args:
        records: Dependency snapshot taken from the manifest
        resolved: Resolver output mapping package name to proposed version
        url_lookup: Optional source URL lookup, called once per candidate

    Returns:
        Candidates sorted from safest to riskiest; empty when up to date
    """
    declared = {record.name: record for record in records}
    candidates: list[UpdateCandidate] = []

    for name, proposed in resolved.items():
        record = declared.get(name)
        if record is None:
            logger.debug("Resolver reported undeclared package %s, skipping", name)
            continue

        current = record.current_range or UNKNOWN_CURRENT
        tier = classify(current, proposed)
        candidates.append(
            UpdateCandidate(
                name=name,
                current_range=current,
                proposed_version=proposed,
                tier=tier,
                section=record.section,
                default_selected=is_default_selected(tier),
                source_url=url_lookup(name) if url_lookup else None,
            )
        )

    # sorted() is stable, so equal tiers keep the resolver's order.
    return sorted(candidates, key=lambda c: c.tier)

