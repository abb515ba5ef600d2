"""Semantic-version coercion and update risk classification."""

import re

from semver import Version

from .models import RiskTier

# First MAJOR[.MINOR[.PATCH[-PRERELEASE]]] run found anywhere in the string.
_COERCE_RE = re.compile(
    r"(?<!\d)(\d{1,16})"
    r"(?:\.(\d{1,16})"
    r"(?:\.(\d{1,16})"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r")?)?"
    r"(?!\d)"
)

_DIFF_TIERS = {
    "major": RiskTier.MAJOR,
    "premajor": RiskTier.PREMAJOR,
    "minor": RiskTier.MINOR,
    "patch": RiskTier.PATCH,
}


def coerce(raw: str | None) -> Version | None:
    """Extract the first parseable version from a raw specifier.

    Missing minor and patch components default to zero, so ``^1.2``
    coerces to ``1.2.0`` and ``>=3 <4`` to ``3.0.0``. Build metadata is
    dropped; a pre-release suffix on a full version is kept.

    Args:
        raw: Version or range string as found in a manifest or registry

    Returns:
        Canonical version, or None when nothing version-like is present
    """
    if not raw:
        return None

    match = _COERCE_RE.search(raw)
    if not match:
        return None

    major, minor, patch, prerelease = match.groups()
    canonical = f"{int(major)}.{int(minor or 0)}.{int(patch or 0)}"
    if prerelease:
        canonical += f"-{prerelease}"

    try:
        return Version.parse(canonical)
    except ValueError:
        return None


def diff(current: Version, candidate: Version) -> str | None:
    """Return the semver difference type between two versions.

    One of ``major``, ``premajor``, ``minor``, ``preminor``, ``patch``,
    ``prepatch``, ``prerelease``, or None when the versions are equal.
    """
    if current.compare(candidate) == 0:
        return None

    high, low = (candidate, current) if current < candidate else (current, candidate)

    if low.prerelease and not high.prerelease:
        # Going from a pre-release to its own release.
        if not low.patch and not low.minor:
            return "major"
        if low.finalize_version() == high:
            if low.minor and not low.patch:
                return "minor"
            return "patch"

    prefix = "pre" if high.prerelease else ""
    if current.major != candidate.major:
        return prefix + "major"
    if current.minor != candidate.minor:
        return prefix + "minor"
    if current.patch != candidate.patch:
        return prefix + "patch"
    return "prerelease"


def classify(current_range: str | None, proposed_version: str | None) -> RiskTier:
    """Classify an update by semantic-versioning risk.

    Never raises: anything that cannot be coerced to a version, and any
    difference other than major, premajor, minor or patch, is
    ``INDETERMINATE``.

    Args:
        current_range: Specifier currently in the manifest (e.g. ``^1.2.0``)
        proposed_version: Version or range proposed by the resolver

    Returns:
        Risk tier of the update
    """
    current = coerce(current_range)
    candidate = coerce(proposed_version)
    if current is None or candidate is None:
        return RiskTier.INDETERMINATE

    return _DIFF_TIERS.get(diff(current, candidate), RiskTier.INDETERMINATE)
