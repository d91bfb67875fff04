"""Collect the confirmed direct clients of a component.

Candidates come from the usage index and are never trusted as-is:
every version of every candidate is checked against the metadata
backend, and only versions that declare the target as a direct
dependency are kept. Don't rely too much on completeness, the usage
index only knows a fraction of the real clients.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from contextlib import AbstractAsyncContextManager
from pathlib import Path

from clientfinder.collector.verifier import DependencyVerifier
from clientfinder.collector.versions import VersionEnumerator
from clientfinder.config import Settings
from clientfinder.constants import TEMP_DIR_PREFIX
from clientfinder.coordinates import (
    ClientResultSet,
    ComponentIdentity,
    ComponentVersion,
)
from clientfinder.metadata.protocols import MetadataBackend
from clientfinder.metadata.workspace import WorkingContext, temporary_context
from clientfinder.resilience.rate_limiter import TokenBucket
from clientfinder.resilience.retry import RequestExecutor, RetryPolicy
from clientfinder.usage.index import UsageIndex
from clientfinder.usage.scraper import UsageScraper

logger = logging.getLogger(__name__)


class ClientCollector:
    """Scrape candidates, enumerate their versions, verify each one.

    The collector owns one executor (and so one rate limiter) per
    external service. With ``max_concurrency > 1`` the versions of a
    candidate are verified concurrently; the limiters still bound the
    request rate.
    """

    def __init__(
        self,
        backend: MetadataBackend,
        index: UsageIndex,
        *,
        metadata_executor: RequestExecutor,
        usage_executor: RequestExecutor,
        max_concurrency: int = 1,
        temp_dir_prefix: str = TEMP_DIR_PREFIX,
        temp_base_dir: Path | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.metadata_executor = metadata_executor
        self.usage_executor = usage_executor
        self._scraper = UsageScraper(index, usage_executor)
        self._versions = VersionEnumerator(backend, metadata_executor)
        self._verifier = DependencyVerifier(backend, metadata_executor)
        self._max_concurrency = max_concurrency
        self._temp_dir_prefix = temp_dir_prefix
        self._temp_base_dir = temp_base_dir

    @classmethod
    def from_settings(
        cls,
        backend: MetadataBackend,
        index: UsageIndex,
        settings: Settings,
    ) -> ClientCollector:
        policy = RetryPolicy.for_mode(
            settings.retry_mode,
            max_attempts=settings.retry_max_attempts,
            cooldown_seconds=settings.retry_cooldown_seconds,
        )
        return cls(
            backend,
            index,
            metadata_executor=RequestExecutor(
                TokenBucket(
                    settings.metadata_rate, settings.rate_burst, name="metadata"
                ),
                policy,
            ),
            usage_executor=RequestExecutor(
                TokenBucket(
                    settings.usage_rate, settings.rate_burst, name="usage-index"
                ),
                policy,
            ),
            max_concurrency=settings.max_concurrency,
            temp_dir_prefix=settings.temp_dir_prefix,
        )

    def _temporary_context(
        self,
    ) -> AbstractAsyncContextManager[WorkingContext]:
        return temporary_context(
            prefix=self._temp_dir_prefix, base_dir=self._temp_base_dir
        )

    # ── Public API ───────────────────────────────────────

    async def collect_clients_of(
        self, target: ComponentVersion | ComponentIdentity
    ) -> list[ComponentVersion] | ClientResultSet:
        """Single-version collection for a version, batch for an identity."""
        if isinstance(target, ComponentVersion):
            return await self.collect_version_clients(target)
        return await self.collect_component_clients(target)

    async def collect_version_clients(
        self,
        target: ComponentVersion,
        context: WorkingContext | None = None,
    ) -> list[ComponentVersion]:
        """Confirmed clients of one target version.

        Without a ``context`` a temporary one is opened for this call.
        A failing scrape propagates; failures for single candidates
        are logged and skipped.
        """
        if context is None:
            async with self._temporary_context() as tmp:
                return await self._collect_version(target, tmp)
        return await self._collect_version(target, context)

    async def collect_component_clients(
        self, identity: ComponentIdentity
    ) -> ClientResultSet:
        """Confirmed clients of every version of ``identity``.

        All lookups share one temporary context, removed at the end.
        """
        result = ClientResultSet()
        async with self._temporary_context() as context:
            targets = await self._versions.enumerate_or_empty(identity)
            for target in targets:
                logger.info("Retrieving all clients of %s", target)
                try:
                    clients = await self._collect_version(target, context)
                except Exception:  # noqa: BLE001
                    logger.error(
                        "Error collecting usage information for %s",
                        target,
                        exc_info=True,
                    )
                    clients = []
                result.extend(target, clients)
        return result

    # ── Internals ────────────────────────────────────────

    async def _collect_version(
        self, target: ComponentVersion, context: WorkingContext
    ) -> list[ComponentVersion]:
        logger.info("Scraping usage pages for %s", target)
        seen: set[ComponentIdentity] = set()
        clients: list[ComponentVersion] = []
        async for candidate in self._scraper.iter_candidates(target):
            if candidate in seen:
                continue
            seen.add(candidate)
            clients.extend(
                await self._clients_from_candidate(target, candidate, context)
            )
        logger.info(
            "Found %d clients of %s among %d candidates",
            len(clients),
            target,
            len(seen),
        )
        return clients

    async def _clients_from_candidate(
        self,
        target: ComponentVersion,
        candidate: ComponentIdentity,
        context: WorkingContext,
    ) -> list[ComponentVersion]:
        logger.info("Looking for matching client versions for %s", candidate)
        try:
            versions = await self._versions.enumerate_or_empty(candidate)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Skipping candidate %s", candidate, exc_info=True
            )
            return []

        matches = await self._bounded_gather(
            [self._verify_one(target, v, context) for v in versions]
        )
        return [v for v, ok in zip(versions, matches, strict=True) if ok]

    async def _verify_one(
        self,
        target: ComponentVersion,
        candidate: ComponentVersion,
        context: WorkingContext,
    ) -> bool:
        try:
            return await self._verifier.verify(target, candidate, context)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Couldn't verify %s against %s",
                candidate,
                target,
                exc_info=True,
            )
            return False

    async def _bounded_gather(
        self, coros: list[Awaitable[bool]]
    ) -> list[bool]:
        if self._max_concurrency == 1:
            return [await c for c in coros]
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _run(coro: Awaitable[bool]) -> bool:
            async with semaphore:
                return await coro

        return list(await asyncio.gather(*(_run(c) for c in coros)))
