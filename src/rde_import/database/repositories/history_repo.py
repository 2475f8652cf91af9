"""
History Repository

Handles logging to the RDE_HISTORY_ENTRIES table.
Every import must be logged for audit compliance.
"""

import logging

from rde_import.database.connection import TransactionConnection
from rde_import.models import HistoryEntry

logger = logging.getLogger("rde.database.history")


class HistoryRepository:
    """Repository for import history entries."""

    def __init__(self, conn: TransactionConnection):
        """Initialize with transaction connection."""
        self.conn = conn

    async def insert(self, entry: HistoryEntry) -> None:
        """
        Insert a history entry.

        The escrow XML is stored byte-for-byte as a BLOB.

        Args:
            entry: History entry to persist
        """
        sql = """
            INSERT INTO RDE_HISTORY_ENTRIES (
                RHE_ID, RHE_TYPE, RHE_PARENT_ROID, RHE_CLIENT_ID,
                RHE_MODIFICATION_TIME, RHE_BY_SUPERUSER, RHE_REQUESTED_BY_REGISTRAR,
                RHE_REASON, RHE_XML, RHE_CLIENT_TRID, RHE_SERVER_TRID,
                RHE_BILLING_ID, RHE_POLL_ID
            ) VALUES (
                :id, :type, :parent_roid, :client_id,
                :modification_time, :by_superuser, :requested_by_registrar,
                :reason, :xml, :client_trid, :server_trid,
                :billing_id, :poll_id
            )
        """
        await self.conn.execute(sql, {
            "id": entry.id,
            "type": entry.type.value,
            "parent_roid": entry.parent_roid,
            "client_id": entry.client_id,
            "modification_time": entry.modification_time,
            "by_superuser": "Y" if entry.by_superuser else "N",
            "requested_by_registrar": "Y" if entry.requested_by_registrar else "N",
            "reason": entry.reason[:255],  # Truncate to column size
            "xml": entry.xml_bytes,
            "client_trid": entry.trid.client_trid,
            "server_trid": entry.trid.server_trid,
            "billing_id": entry.billing_event_id,
            "poll_id": entry.poll_message_id,
        })
        logger.debug(f"Logged history entry {entry.id}: {entry.type.value} {entry.parent_roid}")
