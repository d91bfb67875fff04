"""Protocol-based metadata backend interface.

The Maven Central implementation satisfies this protocol structurally
(no inheritance). Test doubles can be plain classes matching the same
signatures.
"""

from typing import Protocol

from clientfinder.coordinates import (
    ComponentIdentity,
    ComponentVersion,
    DependencyDescriptor,
)
from clientfinder.metadata.workspace import WorkingContext


class MetadataBackend(Protocol):
    async def resolve_version_range(
        self, identity: ComponentIdentity
    ) -> list[str]: ...
    async def fetch_dependency_descriptor(
        self, version: ComponentVersion, context: WorkingContext
    ) -> DependencyDescriptor: ...
