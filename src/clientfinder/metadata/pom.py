"""Minimal POM reading: coordinates, parent, properties, dependencies.

Only what is needed to list the declared direct dependencies of a
project with concrete versions: property interpolation and
``dependencyManagement`` inherited along the parent chain. Profiles,
plugin sections and imported BOMs are ignored.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from clientfinder.constants import DEFAULT_DEPENDENCY_TYPE
from clientfinder.coordinates import ComponentVersion, Dependency
from clientfinder.resilience.errors import BackendError

_PROPERTY_RE = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_PASSES = 10


@dataclass(frozen=True)
class RawDependency:
    """A ``<dependency>`` as written, before interpolation."""

    group: str
    artifact: str
    version: str = ""
    scope: str = ""
    optional: str = ""
    classifier: str = ""
    type: str = ""


@dataclass
class PomModel:
    group: str
    artifact: str
    version: str
    parent: ComponentVersion | None = None
    properties: dict[str, str] = field(default_factory=lambda: dict[str, str]())
    dependencies: list[RawDependency] = field(
        default_factory=lambda: list[RawDependency]()
    )
    managed: list[RawDependency] = field(
        default_factory=lambda: list[RawDependency]()
    )


def _text(tag: Tag | None, name: str) -> str:
    if tag is None:
        return ""
    child = tag.find(name, recursive=False)
    return child.get_text(strip=True) if isinstance(child, Tag) else ""


def _dependencies(container: Tag | None) -> list[RawDependency]:
    if container is None:
        return []
    deps_tag = container.find("dependencies", recursive=False)
    if not isinstance(deps_tag, Tag):
        return []
    result: list[RawDependency] = []
    for dep in deps_tag.find_all("dependency", recursive=False):
        group = _text(dep, "groupId")
        artifact = _text(dep, "artifactId")
        if not group or not artifact:
            continue
        result.append(
            RawDependency(
                group=group,
                artifact=artifact,
                version=_text(dep, "version"),
                scope=_text(dep, "scope"),
                optional=_text(dep, "optional"),
                classifier=_text(dep, "classifier"),
                type=_text(dep, "type"),
            )
        )
    return result


def parse_pom(xml: str) -> PomModel:
    """Parse POM text. Raises BackendError if there is no ``<project>``."""
    soup = BeautifulSoup(xml, "xml")
    project = soup.find("project")
    if not isinstance(project, Tag):
        raise BackendError("Invalid POM: no <project> element")

    parent: ComponentVersion | None = None
    parent_tag = project.find("parent", recursive=False)
    if isinstance(parent_tag, Tag):
        p_group = _text(parent_tag, "groupId")
        p_artifact = _text(parent_tag, "artifactId")
        p_version = _text(parent_tag, "version")
        if p_group and p_artifact and p_version:
            parent = ComponentVersion(p_group, p_artifact, p_version)

    properties: dict[str, str] = {}
    props_tag = project.find("properties", recursive=False)
    if isinstance(props_tag, Tag):
        for prop in props_tag.find_all(recursive=False):
            properties[prop.name] = prop.get_text(strip=True)

    management = project.find("dependencyManagement", recursive=False)
    return PomModel(
        group=_text(project, "groupId") or (parent.group if parent else ""),
        artifact=_text(project, "artifactId"),
        version=_text(project, "version") or (parent.version if parent else ""),
        parent=parent,
        properties=properties,
        dependencies=_dependencies(project),
        managed=_dependencies(management if isinstance(management, Tag) else None),
    )


def _builtin_properties(pom: PomModel) -> tuple[dict[str, str], dict[str, str]]:
    """Return ``(bare, prefixed)`` builtins for ``pom``.

    Bare ``groupId``/``artifactId``/``version`` yield to user
    properties of the same name; ``project.*`` and ``pom.*`` do not.
    """
    values = {
        "groupId": pom.group,
        "artifactId": pom.artifact,
        "version": pom.version,
    }
    prefixed: dict[str, str] = {}
    for prefix in ("project.", "pom."):
        for key, value in values.items():
            prefixed[prefix + key] = value
    if pom.parent is not None:
        prefixed["project.parent.groupId"] = pom.parent.group
        prefixed["project.parent.artifactId"] = pom.parent.artifact
        prefixed["project.parent.version"] = pom.parent.version
    return values, prefixed


def interpolate(value: str, properties: dict[str, str]) -> str:
    """Replace ``${name}`` references; unknown ones are left as-is."""
    for _ in range(_MAX_INTERPOLATION_PASSES):
        replaced = _PROPERTY_RE.sub(
            lambda m: properties.get(m.group(1), m.group(0)), value
        )
        if replaced == value:
            break
        value = replaced
    return value


def _management_key(
    raw: RawDependency, properties: dict[str, str]
) -> tuple[str, str, str, str]:
    return (
        interpolate(raw.group, properties),
        interpolate(raw.artifact, properties),
        interpolate(raw.type, properties) or DEFAULT_DEPENDENCY_TYPE,
        interpolate(raw.classifier, properties),
    )


def effective_dependencies(chain: Sequence[PomModel]) -> list[Dependency]:
    """Resolve the direct dependencies of ``chain[0]``.

    ``chain`` is the project followed by its ancestors, nearest first.
    Child properties, managed versions and dependency declarations win
    over the parent's; an inherited dependency is replaced by the
    nearest declaration with the same group, artifact, type and
    classifier. Dependencies whose version stays unresolved are
    dropped: they can never equal a concrete target version.
    """
    if not chain:
        return []
    project = chain[0]

    bare, prefixed = _builtin_properties(project)
    properties: dict[str, str] = dict(bare)
    for pom in reversed(chain):
        properties.update(pom.properties)
    properties.update(prefixed)

    managed: dict[tuple[str, str, str, str], str] = {}
    for pom in reversed(chain):
        for raw in pom.managed:
            if raw.version:
                managed[_management_key(raw, properties)] = interpolate(
                    raw.version, properties
                )

    declared: set[tuple[str, str, str, str]] = set()
    result: list[Dependency] = []
    for pom in chain:
        for raw in pom.dependencies:
            key = _management_key(raw, properties)
            if key in declared:
                continue
            declared.add(key)
            group, artifact, dep_type, classifier = key
            version = interpolate(raw.version, properties) or managed.get(key, "")
            if not version or "${" in version:
                continue
            result.append(
                Dependency(
                    component=ComponentVersion(group, artifact, version),
                    scope=interpolate(raw.scope, properties) or "compile",
                    optional=raw.optional.lower() == "true",
                    classifier=classifier,
                    type=dep_type,
                )
            )
    return result
