"""Tests for version enumeration."""

from __future__ import annotations

import logging
from collections.abc import Callable

import pytest

from clientfinder.collector.versions import VersionEnumerator
from clientfinder.coordinates import ComponentIdentity, ComponentVersion
from clientfinder.metadata.fakes import FakeMetadataBackend
from clientfinder.resilience.errors import ResolutionError
from clientfinder.resilience.retry import RequestExecutor


@pytest.fixture
def enumerator(
    backend: FakeMetadataBackend,
    make_executor: Callable[..., RequestExecutor],
) -> VersionEnumerator:
    return VersionEnumerator(backend, make_executor())


async def test_versions_in_backend_order(
    enumerator: VersionEnumerator, backend: FakeMetadataBackend
) -> None:
    backend.add_component("g:lib", ["1.0", "1.1", "2.0"])
    versions = await enumerator.enumerate_versions(ComponentIdentity("g", "lib"))
    assert versions == [
        ComponentVersion("g", "lib", "1.0"),
        ComponentVersion("g", "lib", "1.1"),
        ComponentVersion("g", "lib", "2.0"),
    ]


async def test_unknown_identity_raises(enumerator: VersionEnumerator) -> None:
    with pytest.raises(ResolutionError):
        await enumerator.enumerate_versions(ComponentIdentity("no", "such"))


async def test_unknown_identity_or_empty_logs(
    enumerator: VersionEnumerator, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR, logger="clientfinder.collector.versions"):
        versions = await enumerator.enumerate_or_empty(ComponentIdentity("no", "such"))
    assert versions == []
    assert "Couldn't resolve version range of no:such" in caplog.text


async def test_zero_versions_is_empty(
    enumerator: VersionEnumerator, backend: FakeMetadataBackend
) -> None:
    backend.add_component("g:nothing", [])
    assert await enumerator.enumerate_or_empty(ComponentIdentity("g", "nothing")) == []


async def test_transient_backend_failure_is_retried(
    enumerator: VersionEnumerator, backend: FakeMetadataBackend
) -> None:
    backend.add_component("g:lib", ["1.0"])
    backend.failures["g:lib"] = 3
    versions = await enumerator.enumerate_versions(ComponentIdentity("g", "lib"))
    assert versions == [ComponentVersion("g", "lib", "1.0")]
    assert len(backend.version_requests) == 4
