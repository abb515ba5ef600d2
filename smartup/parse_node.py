"""Node.js package.json parsing and serialization."""

import json
import logging
import re
from pathlib import Path

from .errors import ManifestError
from .models import DependencyRecord, ManifestDocument, Section

logger = logging.getLogger(__name__)

_INDENT_RE = re.compile(r"^([ \t]+)\S", re.MULTILINE)


def _detect_indent(content: str) -> str | int:
    match = _INDENT_RE.search(content)
    if not match:
        return 2
    indent = match.group(1)
    if "\t" in indent:
        return "\t"
    return len(indent)


def parse_package_json(content: str) -> ManifestDocument:
    """Parse package.json content into a ManifestDocument.

    Args:
        content: The package.json file content

    Returns:
        Parsed document remembering its indentation and trailing newline

    Raises:
        ManifestError: If the content is not a JSON object
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid package.json: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError("Invalid package.json: top level must be an object")

    return ManifestDocument(
        data=data,
        indent=_detect_indent(content),
        trailing_newline=content.endswith("\n"),
    )


def read_manifest(path: Path) -> ManifestDocument:
    """Read and parse the manifest at ``path``."""
    if not path.is_file():
        raise ManifestError(f"No package.json file found at {path}")
    logger.debug("Reading manifest %s", path)
    return parse_package_json(path.read_text(encoding="utf-8"))


def dependency_records(document: ManifestDocument) -> tuple[DependencyRecord, ...]:
    """Snapshot the declared dependencies, direct ones first.

    A name declared in both sections is kept under ``dependencies`` only,
    which is where an update would be written.
    """
    records: list[DependencyRecord] = []
    seen: set[str] = set()

    for section in (Section.DIRECT, Section.DEVELOPMENT):
        for name, spec in document.section(section).items():
            if name in seen:
                logger.debug("%s is declared in more than one section", name)
                continue
            seen.add(name)
            records.append(
                DependencyRecord(
                    name=name,
                    current_range=spec if isinstance(spec, str) else "",
                    section=section,
                )
            )

    return tuple(records)


def dump_manifest(document: ManifestDocument) -> str:
    """Serialize a document the way it was formatted when read."""
    content = json.dumps(document.data, indent=document.indent, ensure_ascii=False)
    if document.trailing_newline:
        content += "\n"
    return content


def write_manifest(document: ManifestDocument, path: Path) -> None:
    """Write a document back to ``path``."""
    path.write_text(dump_manifest(document), encoding="utf-8")
    logger.debug("Wrote manifest %s", path)
