"""Enumerate the published versions of a component."""

from __future__ import annotations

import logging

from clientfinder.coordinates import ComponentIdentity, ComponentVersion
from clientfinder.metadata.protocols import MetadataBackend
from clientfinder.resilience.errors import ResolutionError
from clientfinder.resilience.retry import RequestExecutor

logger = logging.getLogger(__name__)


class VersionEnumerator:
    def __init__(
        self, backend: MetadataBackend, executor: RequestExecutor
    ) -> None:
        self._backend = backend
        self._executor = executor

    async def enumerate_versions(
        self, identity: ComponentIdentity
    ) -> list[ComponentVersion]:
        """Every version of ``identity``, in backend order.

        Raises ResolutionError when the identity doesn't resolve.
        """
        versions = await self._executor.call(
            lambda: self._backend.resolve_version_range(identity),
            description=f"versions of {identity}",
        )
        return [identity.with_version(v) for v in versions]

    async def enumerate_or_empty(
        self, identity: ComponentIdentity
    ) -> list[ComponentVersion]:
        try:
            return await self.enumerate_versions(identity)
        except ResolutionError:
            logger.error("Couldn't resolve version range of %s", identity)
            return []
