"""
Oracle Registry Store

RegistryStore backed by the registry's Oracle schema. Each store transaction
holds one pooled connection; contact and host lookups lock the rows they
resolve, and staged entities are written through the repositories right
before commit.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from rde_import.database.connection import DatabasePool, TransactionConnection
from rde_import.database.repositories import (
    BillingRepository,
    ContactRepository,
    DomainRepository,
    HistoryRepository,
    HostRepository,
)
from rde_import.database.store import RegistryStore, StoreTransaction
from rde_import.models import (
    BillingRecurring,
    ContactRef,
    DomainLifecycleState,
    HistoryEntry,
    HostRef,
    PollMessageAutorenew,
)

logger = logging.getLogger("rde.database.oracle")

# History first so billing and poll rows can name their parent entry; domain last.
# RHE_BILLING_ID and RHE_POLL_ID are plain ids, not foreign keys.
_WRITE_ORDER = (HistoryEntry, BillingRecurring, PollMessageAutorenew, DomainLifecycleState)


class OracleTransaction(StoreTransaction):
    """Store transaction on one Oracle connection."""

    def __init__(self, conn: TransactionConnection, id_sequence: str):
        self.conn = conn
        self.id_sequence = id_sequence
        self._contacts = ContactRepository(conn)
        self._hosts = HostRepository(conn)
        self._staged: List[object] = []

    async def resolve_contact(self, contact_id: str) -> Optional[ContactRef]:
        return await self._contacts.resolve(contact_id)

    async def resolve_host(self, host_name: str) -> Optional[HostRef]:
        return await self._hosts.resolve(host_name)

    async def allocate_id(self) -> int:
        return await self.conn.get_next_sequence(self.id_sequence)

    async def save(self, *entities) -> None:
        for entity in entities:
            if not isinstance(entity, _WRITE_ORDER):
                raise TypeError(f"Cannot save {type(entity).__name__}")
        self._staged.extend(entities)

    async def flush(self) -> None:
        """Write staged entities in _WRITE_ORDER."""
        domains = DomainRepository(self.conn)
        billing = BillingRepository(self.conn)
        history = HistoryRepository(self.conn)

        for entity_type in _WRITE_ORDER:
            for entity in self._staged:
                if not isinstance(entity, entity_type):
                    continue
                if entity_type is HistoryEntry:
                    await history.insert(entity)
                elif entity_type is BillingRecurring:
                    await billing.insert_recurring(entity)
                elif entity_type is PollMessageAutorenew:
                    await billing.insert_poll_message(entity)
                else:
                    await domains.insert(entity)

        logger.debug(f"Flushed {len(self._staged)} entities")
        self._staged = []


class OracleStore(RegistryStore):
    """Registry store on an Oracle connection pool."""

    def __init__(self, pool: DatabasePool, id_sequence: str = "RDE_ENTITY_ID_SEQ"):
        self.pool = pool
        self.id_sequence = id_sequence

    @asynccontextmanager
    async def transaction(self):
        async with self.pool.transaction() as conn:
            tx = OracleTransaction(conn, self.id_sequence)
            yield tx
            await tx.flush()
