"""Disposable local repositories for metadata lookups.

Exploratory lookups download many descriptors we don't want to keep,
so each collection run works in its own temporary directory instead of
the user's persistent cache, and removes it on the way out.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from clientfinder.constants import TEMP_DIR_PREFIX
from clientfinder.coordinates import ComponentVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkingContext:
    """A local repository rooted at ``root`` (Maven directory layout)."""

    root: Path

    def artifact_path(self, version: ComponentVersion, extension: str) -> Path:
        return (
            self.root.joinpath(*version.group.split("."))
            / version.artifact
            / version.version
            / f"{version.artifact}-{version.version}.{extension}"
        )


def remove_context(context: WorkingContext) -> bool:
    """Delete the context directory. Failures are logged, never raised."""
    try:
        shutil.rmtree(context.root)
    except FileNotFoundError:
        return True
    except OSError:
        logger.exception(
            "Couldn't remove temporary repository %s", context.root
        )
        return False
    return True


@asynccontextmanager
async def temporary_context(
    prefix: str = TEMP_DIR_PREFIX,
    base_dir: Path | None = None,
) -> AsyncIterator[WorkingContext]:
    """Yield a fresh context, removing it on every exit path."""
    root = Path(tempfile.mkdtemp(prefix=prefix, dir=base_dir))
    context = WorkingContext(root=root)
    logger.debug("Opened temporary repository %s", root)
    try:
        yield context
    finally:
        remove_context(context)
