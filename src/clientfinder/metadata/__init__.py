"""Authoritative component metadata: versions and declared dependencies."""

from clientfinder.metadata.maven_central import MavenCentralBackend
from clientfinder.metadata.protocols import MetadataBackend
from clientfinder.metadata.workspace import WorkingContext, temporary_context

__all__ = [
    "MavenCentralBackend",
    "MetadataBackend",
    "WorkingContext",
    "temporary_context",
]
