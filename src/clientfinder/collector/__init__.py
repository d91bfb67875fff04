"""Client discovery: scrape candidates, enumerate versions, verify edges."""

from clientfinder.collector.collector import ClientCollector
from clientfinder.collector.verifier import DependencyVerifier, declares
from clientfinder.collector.versions import VersionEnumerator

__all__ = [
    "ClientCollector",
    "DependencyVerifier",
    "VersionEnumerator",
    "declares",
]
