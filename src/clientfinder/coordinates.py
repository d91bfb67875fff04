"""Value objects for Maven coordinates and collected results."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from clientfinder.constants import DEFAULT_DEPENDENCY_TYPE


@dataclass(frozen=True)
class ComponentIdentity:
    """A ``group:artifact`` pair, independent of any version."""

    group: str
    artifact: str

    @classmethod
    def parse(cls, coordinates: str) -> ComponentIdentity:
        parts = coordinates.strip().split(":")
        if len(parts) != 2 or not all(parts):
            msg = f"Expected 'group:artifact', got {coordinates!r}"
            raise ValueError(msg)
        return cls(group=parts[0], artifact=parts[1])

    def with_version(self, version: str) -> ComponentVersion:
        return ComponentVersion(self.group, self.artifact, version)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}"


@dataclass(frozen=True)
class ComponentVersion:
    """A component pinned to a concrete version.

    The canonical form is ``group:artifact:version``; equality and
    hashing follow the three fields, which is the same as comparing
    canonical strings.
    """

    group: str
    artifact: str
    version: str

    @classmethod
    def parse(cls, coordinates: str) -> ComponentVersion:
        parts = coordinates.strip().split(":")
        if len(parts) != 3 or not all(parts):
            msg = f"Expected 'group:artifact:version', got {coordinates!r}"
            raise ValueError(msg)
        return cls(group=parts[0], artifact=parts[1], version=parts[2])

    @property
    def identity(self) -> ComponentIdentity:
        return ComponentIdentity(self.group, self.artifact)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"


def parse_coordinates(
    coordinates: str,
) -> ComponentIdentity | ComponentVersion:
    """Parse ``g:a`` into an identity or ``g:a:v`` into a version."""
    if coordinates.count(":") == 2:
        return ComponentVersion.parse(coordinates)
    return ComponentIdentity.parse(coordinates)


@dataclass(frozen=True)
class Dependency:
    """One direct dependency declared in a descriptor.

    ``type`` and ``classifier`` select a secondary artifact of
    ``component``; only the default jar with no classifier stands for
    the component itself.
    """

    component: ComponentVersion
    scope: str = "compile"
    optional: bool = False
    classifier: str = ""
    type: str = DEFAULT_DEPENDENCY_TYPE

    @property
    def is_main_artifact(self) -> bool:
        return self.type == DEFAULT_DEPENDENCY_TYPE and not self.classifier



@dataclass(frozen=True)
class DependencyDescriptor:
    """Declared direct dependencies of one component version."""

    component: ComponentVersion
    dependencies: tuple[Dependency, ...] = ()


@dataclass(frozen=True)
class DependencyEdge:
    """``consumer`` directly declares ``dependee`` as a dependency."""

    consumer: ComponentVersion
    dependee: ComponentVersion


@dataclass
class ClientResultSet:
    """Confirmed clients per target version.

    Duplicates are kept; callers that need set semantics use
    :meth:`as_sets`.
    """

    _clients: dict[ComponentVersion, list[ComponentVersion]] = field(
        default_factory=lambda: dict[ComponentVersion, list[ComponentVersion]]()
    )

    def add(self, target: ComponentVersion, client: ComponentVersion) -> None:
        self._clients.setdefault(target, []).append(client)

    def extend(
        self,
        target: ComponentVersion,
        clients: Iterable[ComponentVersion],
    ) -> None:
        """Record ``target`` (even with no clients) and append ``clients``."""
        self._clients.setdefault(target, []).extend(clients)

    def clients_of(self, target: ComponentVersion) -> list[ComponentVersion]:
        return list(self._clients.get(target, []))

    @property
    def targets(self) -> list[ComponentVersion]:
        return list(self._clients)

    @property
    def total_clients(self) -> int:
        return sum(len(c) for c in self._clients.values())

    def as_sets(self) -> dict[ComponentVersion, set[ComponentVersion]]:
        return {t: set(c) for t, c in self._clients.items()}

    def items(self) -> Iterator[tuple[ComponentVersion, list[ComponentVersion]]]:
        for target, clients in self._clients.items():
            yield target, list(clients)

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, target: object) -> bool:
        return target in self._clients
