"""Confirm a candidate by reading its declared direct dependencies."""

from __future__ import annotations

from clientfinder.coordinates import (
    ComponentVersion,
    DependencyDescriptor,
    DependencyEdge,
)
from clientfinder.metadata.protocols import MetadataBackend
from clientfinder.metadata.workspace import WorkingContext
from clientfinder.resilience.retry import RequestExecutor


def declares(
    descriptor: DependencyDescriptor, target: ComponentVersion
) -> bool:
    """True iff a direct dependency is exactly ``group:artifact:version``.

    A matching group and artifact with another version, or a range
    that would include the target, is not a match. Neither is a
    secondary artifact such as a ``test-jar`` or a classified jar.
    """
    return any(
        dependency.is_main_artifact and str(dependency.component) == str(target)
        for dependency in descriptor.dependencies
    )



class DependencyVerifier:
    def __init__(
        self, backend: MetadataBackend, executor: RequestExecutor
    ) -> None:
        self._backend = backend
        self._executor = executor

    async def fetch_descriptor(
        self, candidate: ComponentVersion, context: WorkingContext
    ) -> DependencyDescriptor:
        return await self._executor.call(
            lambda: self._backend.fetch_dependency_descriptor(candidate, context),
            description=f"descriptor of {candidate}",
        )

    async def matching_edge(
        self,
        target: ComponentVersion,
        candidate: ComponentVersion,
        context: WorkingContext,
    ) -> DependencyEdge | None:
        descriptor = await self.fetch_descriptor(candidate, context)
        if declares(descriptor, target):
            return DependencyEdge(consumer=candidate, dependee=target)
        return None

    async def verify(
        self,
        target: ComponentVersion,
        candidate: ComponentVersion,
        context: WorkingContext,
    ) -> bool:
        return await self.matching_edge(target, candidate, context) is not None
