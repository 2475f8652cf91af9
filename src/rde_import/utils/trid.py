"""
Server Transaction IDs

Generates server transaction IDs (svTRID) for import history entries.

Format: <PREFIX>-<YYYYMMDDHHMMSS>-<COUNTER>-<REGISTRY_SUFFIX>
Example: RDE-20240115103000-000042-ARI
"""

import itertools
import re
from datetime import datetime, timezone
from typing import Optional

DEFAULT_PREFIX = "RDE"
DEFAULT_REGISTRY_SUFFIX = "ARI"

TRID_PATTERN = re.compile(r"^[A-Z]+-\d{14}-\d{6,}-[A-Za-z0-9]+$")


class TridGenerator:
    """Generates unique server transaction IDs."""

    def __init__(self, registry_suffix: str = DEFAULT_REGISTRY_SUFFIX, prefix: str = DEFAULT_PREFIX):
        self.registry_suffix = registry_suffix
        self.prefix = prefix
        self._counter = itertools.count(1)

    def generate(self, now: Optional[datetime] = None) -> str:
        """Generate unique server transaction ID."""
        timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d%H%M%S")
        return f"{self.prefix}-{timestamp}-{next(self._counter):06d}-{self.registry_suffix}"


def is_valid_server_trid(trid: str) -> bool:
    """Check a server transaction ID against the generated format."""
    return bool(trid) and TRID_PATTERN.match(trid) is not None
