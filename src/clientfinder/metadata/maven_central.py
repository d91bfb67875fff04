"""Metadata backend reading a Maven 2 layout repository over HTTP.

Versions come from ``maven-metadata.xml``; descriptors from the POM
and its parent chain. Downloaded POMs are written to the working
context in local-repository layout and reused within a run.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx
from bs4 import BeautifulSoup

from clientfinder.constants import (
    MAVEN_CENTRAL_URL,
    MAVEN_METADATA_FILE,
    MAX_PARENT_DEPTH,
    OPEN_VERSION_RANGE,
    REQUEST_TIMEOUT_SECONDS,
)
from clientfinder.coordinates import (
    ComponentIdentity,
    ComponentVersion,
    DependencyDescriptor,
)
from clientfinder.metadata.pom import PomModel, effective_dependencies, parse_pom
from clientfinder.metadata.workspace import WorkingContext
from clientfinder.resilience.errors import BackendError, ResolutionError

logger = logging.getLogger(__name__)


def parse_metadata_versions(xml: str) -> list[str]:
    """Read ``versioning/versions/version`` in document order, deduplicated."""
    soup = BeautifulSoup(xml, "xml")
    versions: list[str] = []
    for tag in soup.select("versioning > versions > version"):
        text = tag.get_text(strip=True)
        if text and text not in versions:
            versions.append(text)
    return versions


def _store(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class MavenCentralBackend:
    def __init__(
        self,
        client: httpx.AsyncClient,
        repository_url: str = MAVEN_CENTRAL_URL,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._repository_url = repository_url.rstrip("/")
        self._timeout = timeout

    def _artifact_dir(self, group: str, artifact: str) -> str:
        return f"{self._repository_url}/{group.replace('.', '/')}/{artifact}"

    def pom_url(self, version: ComponentVersion) -> str:
        base = self._artifact_dir(version.group, version.artifact)
        return f"{base}/{version.version}/{version.artifact}-{version.version}.pom"

    async def resolve_version_range(
        self, identity: ComponentIdentity
    ) -> list[str]:
        """All published versions in ``[0,)``, as listed by the repository."""
        url = f"{self._artifact_dir(identity.group, identity.artifact)}/{MAVEN_METADATA_FILE}"
        response = await self._client.get(url, timeout=self._timeout)
        if response.status_code == 404:
            raise ResolutionError(f"{identity}:{OPEN_VERSION_RANGE}", "no metadata")
        if not response.is_success:
            raise BackendError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
            )
        versions = parse_metadata_versions(response.text)
        if not versions:
            raise ResolutionError(f"{identity}:{OPEN_VERSION_RANGE}", "no versions")
        return versions

    async def _download_pom(self, version: ComponentVersion) -> str | None:
        url = self.pom_url(version)
        response = await self._client.get(url, timeout=self._timeout)
        if response.status_code == 404:
            return None
        if not response.is_success:
            raise BackendError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
            )
        return response.text

    async def load_pom(
        self, version: ComponentVersion, context: WorkingContext
    ) -> PomModel | None:
        """Return the parsed POM, or None when the repository has none."""
        path = context.artifact_path(version, "pom")
        if await asyncio.to_thread(path.is_file):
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            return parse_pom(text)
        downloaded = await self._download_pom(version)
        if downloaded is None:
            return None
        pom = parse_pom(downloaded)
        await asyncio.to_thread(_store, path, downloaded)
        return pom

    async def fetch_dependency_descriptor(
        self, version: ComponentVersion, context: WorkingContext
    ) -> DependencyDescriptor:
        """Declared direct dependencies of ``version``.

        A missing POM gives an empty descriptor; a missing parent
        truncates the inheritance chain.
        """
        pom = await self.load_pom(version, context)
        if pom is None:
            logger.warning("No POM for %s, assuming no dependencies", version)
            return DependencyDescriptor(component=version)

        chain = [pom]
        parent = pom.parent
        while parent is not None and len(chain) <= MAX_PARENT_DEPTH:
            parent_pom = await self.load_pom(parent, context)
            if parent_pom is None:
                logger.warning("Missing parent POM %s of %s", parent, version)
                break
            chain.append(parent_pom)
            parent = parent_pom.parent

        return DependencyDescriptor(
            component=version,
            dependencies=tuple(effective_dependencies(chain)),
        )
