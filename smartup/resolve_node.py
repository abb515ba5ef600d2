"""npm registry version resolution."""

import asyncio
import logging
import re
from collections.abc import Iterable
from urllib.parse import quote

import httpx

from .classify import coerce
from .config import DEFAULT_REGISTRY
from .errors import ResolutionError
from .models import DependencyRecord, ResolvedCandidate

logger = logging.getLogger(__name__)

# Specifiers that do not point at a registry version range.
_NON_REGISTRY_PREFIXES = (
    "file:",
    "link:",
    "workspace:",
    "portal:",
    "patch:",
    "npm:",
    "git",
    "github:",
    "http:",
    "https:",
)

_SIMPLE_RANGE_RE = re.compile(r"^\s*(\^|~|>=|>|=)?\s*v?\d+(\.[\dxX*]+){0,2}(-[0-9A-Za-z.-]+)?\s*$")

# 1.x, 1.2.*, ^1.x.x: concrete leading components followed by wildcards.
_WILDCARD_RE = re.compile(r"^\s*(\^|~|>=|>|=)?\s*v?(\d+(?:\.\d+)?)((?:\.[xX*])+)\s*$")

ABBREVIATED_METADATA = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8"


def is_registry_range(spec: str) -> bool:
    """Check whether a specifier is a version range the registry can satisfy."""
    spec = spec.strip()
    if not spec or spec.startswith(_NON_REGISTRY_PREFIXES) or "/" in spec:
        return False
    return coerce(spec) is not None


def wildcard_precision(spec: str) -> int | None:
    """Number of concrete components in a wildcard range, else None.

    ``1.x`` has precision 1, ``1.2.*`` precision 2.
    """
    match = _WILDCARD_RE.match(spec)
    if not match:
        return None
    return match.group(2).count(".") + 1


def upgrade_spec(current_spec: str, latest: str) -> str:
    """Rewrite a specifier to target ``latest``, keeping its operator.

    ``^1.0.0`` becomes ``^1.3.0`` and wildcards keep their precision, so
    ``1.x`` becomes ``2.x``. Compound ranges such as ``>=1.0.0 <2.0.0``
    are replaced by the bare version.
    """
    wildcard = _WILDCARD_RE.match(current_spec)
    newest = coerce(latest)
    if wildcard and newest is not None:
        precision = wildcard.group(2).count(".") + 1
        components = ".".join(str(c) for c in newest.to_tuple()[:precision])
        return f"{wildcard.group(1) or ''}{components}{wildcard.group(3)}"

    match = _SIMPLE_RANGE_RE.match(current_spec)
    if not match:
        return latest
    return f"{match.group(1) or ''}{latest}"


class NpmResolver:
    """Resolver for npm package versions."""

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY,
        timeout: float = 30.0,
        max_concurrency: int = 6,
    ):
        """Initialize npm resolver.

        Args:
            registry_url: Base URL of the npm registry
            timeout: Request timeout in seconds
            max_concurrency: Maximum concurrent requests
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self._cache: dict[str, dict] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def get_latest_version(self, package_name: str) -> str:
        """Get the version tagged ``latest`` for a package.

        Args:
            package_name: Name of the package

        Returns:
            Latest version string

        Raises:
            ResolutionError: If the package or its latest tag is missing
        """
        metadata = await self._fetch_package_metadata(package_name)
        if not metadata:
            raise ResolutionError(f"Package {package_name} not found")

        latest = metadata.get("dist-tags", {}).get("latest")
        if not latest:
            raise ResolutionError(f"No latest version published for {package_name}")
        return latest

    async def resolve_record(self, record: DependencyRecord) -> ResolvedCandidate | None:
        """Resolve one dependency to its proposed upgrade.

        Args:
            record: Dependency declared in the manifest

        Returns:
            Proposed upgrade, or None if the dependency is up to date or not
            a registry dependency
        """
        if not is_registry_range(record.current_range):
            logger.debug("Skipping %s (%s): not a registry range", record.name, record.current_range)
            return None

        async with self._semaphore:
            latest = await self.get_latest_version(record.name)

        current = coerce(record.current_range)
        newest = coerce(latest)
        if current is None or newest is None or not current < newest:
            logger.debug("%s is up to date (%s)", record.name, record.current_range)
            return None

        precision = wildcard_precision(record.current_range)
        if precision and current.to_tuple()[:precision] == newest.to_tuple()[:precision]:
            logger.debug("%s: %s already covers %s", record.name, record.current_range, latest)
            return None

        return ResolvedCandidate(
            name=record.name,
            latest_allowed=upgrade_spec(record.current_range, latest),
        )

    async def resolve(
        self,
        records: Iterable[DependencyRecord],
        allow: list[str] | None = None,
    ) -> dict[str, str]:
        """Resolve dependencies concurrently.

        Args:
            records: Dependencies to check
            allow: Optional explicit list of names to restrict the query to

        Returns:
            Mapping of package name to proposed version, in manifest order,
            containing only dependencies with an available update
        """
        if allow is not None:
            allowed = set(allow)
            records = [r for r in records if r.name in allowed]

        tasks = [self.resolve_record(record) for record in records]
        results = await asyncio.gather(*tasks)
        return {r.name: r.latest_allowed for r in results if r is not None}

    async def _fetch_package_metadata(self, package_name: str) -> dict | None:
        """Fetch package metadata from the registry.

        Args:
            package_name: Name of the package

        Returns:
            Package metadata dict or None if not found
        """
        if package_name in self._cache:
            return self._cache[package_name]

        # Scoped names keep the leading @ but escape the slash.
        url = f"{self.registry_url}/{quote(package_name, safe='@')}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers={"Accept": ABBREVIATED_METADATA})
                if response.status_code == 404:
                    return None
                response.raise_for_status()

                metadata = response.json()
                self._cache[package_name] = metadata
                return metadata

        except httpx.TimeoutException as e:
            raise ResolutionError(f"Timeout fetching metadata for {package_name}") from e
        except httpx.HTTPStatusError as e:
            raise ResolutionError(f"HTTP error fetching {package_name}: {e}") from e
        except httpx.HTTPError as e:
            raise ResolutionError(f"Network error fetching {package_name}: {e}") from e
        except ValueError as e:
            raise ResolutionError(f"Invalid metadata for {package_name}: {e}") from e
