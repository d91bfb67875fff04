"""Shared constants: single source of truth for cross-module values.

Rates and timeouts were tuned empirically to stay under the blocking
thresholds of Maven Central and mvnrepository.com.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class RetryMode(StrEnum):
    """Which failures the request executor retries."""

    ALL = "all"  # every failure except unresolvable identities
    CLASSIFIED = "classified"  # only transient/server/timeout errors


class OutputFormat(StrEnum):
    """Supported result export formats."""

    TEXT = "text"
    JSON = "json"


# ── External Services ────────────────────────────────────

MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2"
USAGE_INDEX_URL = "https://mvnrepository.com"
USAGE_PAGE_PATH = "/artifact/{group}/{artifact}/{version}/usages"

# Browsers get past the index's bot filter more reliably than httpx defaults
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

# ── Rate Limits (permits / second) ───────────────────────

METADATA_RATE = 2.5
USAGE_RATE = 4.0
RATE_BURST = 1.0

# ── Retry Strategy ───────────────────────────────────────

RETRY_COOLDOWN_SECONDS = 10.0
REQUEST_TIMEOUT_SECONDS = 10.0

# ── Scraping ─────────────────────────────────────────────

FIRST_USAGE_PAGE = 1
USAGE_ROW_SELECTOR = "p.im-subtitle"
LINKS_PER_USAGE_ROW = 2

# ── Metadata Resolution ──────────────────────────────────

OPEN_VERSION_RANGE = "[0,)"
MAVEN_METADATA_FILE = "maven-metadata.xml"
MAX_PARENT_DEPTH = 10
DEFAULT_DEPENDENCY_TYPE = "jar"
TEMP_DIR_PREFIX = "clientfinder-repo-"

# ── Misc ─────────────────────────────────────────────────

DEFAULT_TARGET = "org.sonarsource.sonarqube:sonar-plugin-api"
ERROR_TRUNCATION_CHARS = 200
