"""Apply a confirmed selection of updates to a manifest."""

import copy
import logging
from collections.abc import Iterable

from .errors import MutationInconsistency
from .models import ManifestDocument, Section, UpdateCandidate
from .selection import validate_selection

logger = logging.getLogger(__name__)


def apply_updates(
    document: ManifestDocument,
    selection: Iterable[str],
    catalog: list[UpdateCandidate],
) -> ManifestDocument:
    """Return a copy of ``document`` with the selected updates written in.

    Each selected entry's specifier is replaced by the candidate's proposed
    version as reported by the resolver. Key order, unselected entries and
    every other field are left as they were.

    Args:
        document: Manifest to update; it is not modified
        selection: Names of the candidates the user confirmed
        catalog: Classified candidates the selection was made from

    Returns:
        The updated manifest document

    Raises:
        SelectionError: If a selected name is not in the catalog
        MutationInconsistency: If a selected name is in neither section
    """
    chosen = validate_selection(selection, catalog)
    updated = ManifestDocument(
        data=copy.deepcopy(document.data),
        indent=document.indent,
        trailing_newline=document.trailing_newline,
    )

    for candidate in catalog:
        if candidate.name not in chosen:
            continue

        for section in (candidate.section, Section.DIRECT, Section.DEVELOPMENT):
            deps = updated.data.get(section.value)
            if isinstance(deps, dict) and candidate.name in deps:
                logger.debug(
                    "%s: %s -> %s (%s)",
                    candidate.name,
                    deps[candidate.name],
                    candidate.proposed_version,
                    section.value,
                )
                deps[candidate.name] = candidate.proposed_version
                break
        else:
            raise MutationInconsistency(
                f"{candidate.name} is not declared in dependencies or devDependencies"
            )

    return updated
