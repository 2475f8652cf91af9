"""
Contact Repository

Resolves escrowed contact ids against the CONTACTS table.
"""

import logging
from typing import Optional

from rde_import.database.connection import TransactionConnection
from rde_import.models import ContactRef

logger = logging.getLogger("rde.database.contact")


class ContactRepository:
    """
    Repository for contact lookups inside an import transaction.

    All queries use parameterized statements to prevent SQL injection.
    """

    def __init__(self, conn: TransactionConnection):
        """Initialize with transaction connection."""
        self.conn = conn

    async def resolve(self, contact_id: str) -> Optional[ContactRef]:
        """
        Get contact reference by user ID.

        The row is locked for the rest of the transaction so the contact
        cannot be deleted underneath the import.

        Args:
            contact_id: Contact identifier (CON_UID)

        Returns:
            ContactRef or None
        """
        sql = """
            SELECT c.CON_ROID
            FROM CONTACTS c
            JOIN REGISTRY_OBJECTS o ON c.CON_ROID = o.OBJ_ROID
            WHERE c.CON_UID = :contact_id
              AND o.OBJ_DELETE_DATE IS NULL
            FOR UPDATE OF c.CON_ROID
        """
        row = await self.conn.query_one(sql, {"contact_id": contact_id})
        if not row:
            logger.debug(f"Contact {contact_id} not found")
            return None
        return ContactRef(contact_id=contact_id, roid=row["CON_ROID"])
