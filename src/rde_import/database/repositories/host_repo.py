"""
Host Repository

Resolves escrowed nameserver names against the HOSTS table.
"""

import logging
from typing import Optional

from rde_import.database.connection import TransactionConnection
from rde_import.models import HostRef

logger = logging.getLogger("rde.database.host")


class HostRepository:
    """Repository for host lookups inside an import transaction."""

    def __init__(self, conn: TransactionConnection):
        """Initialize with transaction connection."""
        self.conn = conn

    async def resolve(self, hostname: str) -> Optional[HostRef]:
        """
        Get host reference by name (case-insensitive), locking the row.

        Args:
            hostname: Host FQDN

        Returns:
            HostRef or None
        """
        sql = """
            SELECT h.HOS_ROID
            FROM HOSTS h
            JOIN REGISTRY_OBJECTS o ON h.HOS_ROID = o.OBJ_ROID
            WHERE LOWER(h.HOS_NAME) = :hostname
              AND o.OBJ_DELETE_DATE IS NULL
            FOR UPDATE OF h.HOS_ROID
        """
        hostname = hostname.lower()
        row = await self.conn.query_one(sql, {"hostname": hostname})
        if not row:
            logger.debug(f"Host {hostname} not found")
            return None
        return HostRef(host_name=hostname, roid=row["HOS_ROID"])
