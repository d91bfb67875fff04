"""In-memory metadata backend for testing.

Dict-backed implementation of the MetadataBackend protocol.
No HTTP, no files, instant operations for unit tests.
"""

from __future__ import annotations

from clientfinder.coordinates import (
    ComponentIdentity,
    ComponentVersion,
    Dependency,
    DependencyDescriptor,
)
from clientfinder.metadata.workspace import WorkingContext
from clientfinder.resilience.errors import ResolutionError


class FakeMetadataBackend:
    """Versions and descriptors registered up front.

    Unknown identities raise ResolutionError; unknown versions have
    no dependencies. ``failures`` maps a coordinate string to a number
    of leading calls that raise ``failure_exc`` before succeeding.
    """

    def __init__(self) -> None:
        self._versions: dict[ComponentIdentity, list[str]] = {}
        self._dependencies: dict[ComponentVersion, list[Dependency]] = {}
        self.failures: dict[str, int] = {}
        self.failure_exc: type[Exception] = ConnectionError
        self.version_requests: list[ComponentIdentity] = []
        self.descriptor_requests: list[ComponentVersion] = []
        self.contexts: list[WorkingContext] = []

    def add_component(
        self, coordinates: str, versions: list[str]
    ) -> None:
        self._versions[ComponentIdentity.parse(coordinates)] = list(versions)

    def add_dependencies(self, consumer: str, *dependees: str) -> None:
        version = ComponentVersion.parse(consumer)
        self._dependencies.setdefault(version, []).extend(
            Dependency(component=ComponentVersion.parse(d)) for d in dependees
        )

    def _maybe_fail(self, key: str) -> None:
        remaining = self.failures.get(key, 0)
        if remaining > 0:
            self.failures[key] = remaining - 1
            raise self.failure_exc(f"backend busy for {key}")

    async def resolve_version_range(
        self, identity: ComponentIdentity
    ) -> list[str]:
        self.version_requests.append(identity)
        self._maybe_fail(str(identity))
        if identity not in self._versions:
            raise ResolutionError(str(identity), "not found")
        return list(self._versions[identity])

    async def fetch_dependency_descriptor(
        self, version: ComponentVersion, context: WorkingContext
    ) -> DependencyDescriptor:
        self.descriptor_requests.append(version)
        self.contexts.append(context)
        self._maybe_fail(str(version))
        return DependencyDescriptor(
            component=version,
            dependencies=tuple(self._dependencies.get(version, [])),
        )
