"""Default selection policy and selection validation."""

from collections.abc import Iterable

from .errors import SelectionError
from .models import RiskTier, UpdateCandidate

# Updates unlikely to break compatibility are pre-selected.
SAFE_TIERS = frozenset({RiskTier.PATCH, RiskTier.MINOR})


def is_default_selected(tier: RiskTier) -> bool:
    return tier in SAFE_TIERS


def default_selection(catalog: list[UpdateCandidate]) -> frozenset[str]:
    """Names that start checked in the interactive selection."""
    return frozenset(c.name for c in catalog if c.default_selected)


def validate_selection(
    selection: Iterable[str], catalog: list[UpdateCandidate]
) -> frozenset[str]:
    """Check that a confirmed selection only names catalog entries.

    Args:
        selection: Names returned by the interactive selection
        catalog: Candidates that were offered

    Returns:
        The selection as a set of unique names

    Raises:
        SelectionError: If any name was never offered
    """
    chosen = frozenset(selection)
    unknown = chosen - {c.name for c in catalog}
    if unknown:
        raise SelectionError(
            f"Selection contains packages not in the catalog: {', '.join(sorted(unknown))}"
        )
    return chosen
