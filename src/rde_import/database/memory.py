"""
In-Memory Registry Store

Store implementation backed by dictionaries. Used for dry-run imports
(seeded from the contacts and hosts of the deposit itself) and in tests.

Transactions are optimistic: every contact/host lookup records the version it
saw, and commit fails with ConflictError if any of those changed before the
writes are applied.
"""

import asyncio
import itertools
import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Tuple

from rde_import.database.store import RegistryStore, StoreTransaction
from rde_import.exceptions import ConflictError
from rde_import.models import (
    BillingRecurring,
    ContactRef,
    DomainLifecycleState,
    HistoryEntry,
    HostRef,
    PollMessageAutorenew,
)

logger = logging.getLogger("rde.database.memory")

_Key = Tuple[str, str]


class MemoryTransaction(StoreTransaction):
    """Transaction against a MemoryStore; buffers writes until commit."""

    def __init__(self, store: "MemoryStore"):
        self._store = store
        self._reads: Dict[_Key, int] = {}
        self._writes: List[object] = []

    async def resolve_contact(self, contact_id: str) -> Optional[ContactRef]:
        key = ("contact", contact_id)
        self._reads[key] = self._store._versions.get(key, 0)
        return self._store._contacts.get(contact_id)

    async def resolve_host(self, host_name: str) -> Optional[HostRef]:
        key = ("host", host_name.lower())
        self._reads[key] = self._store._versions.get(key, 0)
        return self._store._hosts.get(host_name.lower())

    async def allocate_id(self) -> int:
        return next(self._store._ids)

    async def save(self, *entities) -> None:
        for entity in entities:
            if not isinstance(entity, MemoryStore.ENTITY_TYPES):
                raise TypeError(f"Cannot save {type(entity).__name__}")
        self._writes.extend(entities)


class MemoryStore(RegistryStore):
    """
    Dictionary-backed registry store.

    Contacts are keyed by escrow id, hosts by lowercase name. Imported
    entities are kept in insertion order.
    """

    ENTITY_TYPES = (DomainLifecycleState, BillingRecurring, PollMessageAutorenew, HistoryEntry)

    def __init__(self):
        self._contacts: Dict[str, ContactRef] = {}
        self._hosts: Dict[str, HostRef] = {}
        self._versions: Dict[_Key, int] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

        self.domains: List[DomainLifecycleState] = []
        self.billing_events: Dict[int, BillingRecurring] = {}
        self.poll_messages: Dict[int, PollMessageAutorenew] = {}
        self.history_entries: Dict[int, HistoryEntry] = {}

    # ========================================================================
    # Reference Data
    # ========================================================================

    def _bump(self, key: _Key) -> None:
        self._versions[key] = self._versions.get(key, 0) + 1

    def add_contact(self, contact_id: str, roid: str) -> ContactRef:
        ref = ContactRef(contact_id=contact_id, roid=roid)
        self._contacts[contact_id] = ref
        self._bump(("contact", contact_id))
        return ref

    def add_host(self, host_name: str, roid: str) -> HostRef:
        ref = HostRef(host_name=host_name.lower(), roid=roid)
        self._hosts[ref.host_name] = ref
        self._bump(("host", ref.host_name))
        return ref

    def delete_contact(self, contact_id: str) -> None:
        self._contacts.pop(contact_id, None)
        self._bump(("contact", contact_id))

    def delete_host(self, host_name: str) -> None:
        self._hosts.pop(host_name.lower(), None)
        self._bump(("host", host_name.lower()))

    # ========================================================================
    # Transactions
    # ========================================================================

    @asynccontextmanager
    async def transaction(self):
        """
        Open an optimistic transaction.

        Commits on successful exit, discards buffered writes on exception.
        """
        tx = MemoryTransaction(self)
        try:
            yield tx
        except Exception:
            logger.debug(f"Transaction aborted, discarding {len(tx._writes)} staged entities")
            raise
        await self._commit(tx)

    async def _commit(self, tx: MemoryTransaction) -> None:
        async with self._lock:
            for key, seen in tx._reads.items():
                if self._versions.get(key, 0) != seen:
                    raise ConflictError(f"{key[0].title()} '{key[1]}' changed during transaction")

            for entity in tx._writes:
                if isinstance(entity, DomainLifecycleState):
                    self.domains.append(entity)
                elif isinstance(entity, BillingRecurring):
                    self.billing_events[entity.id] = entity
                elif isinstance(entity, PollMessageAutorenew):
                    self.poll_messages[entity.id] = entity
                elif isinstance(entity, HistoryEntry):
                    self.history_entries[entity.id] = entity

        logger.debug(f"Committed {len(tx._writes)} entities")

    # ========================================================================
    # Queries
    # ========================================================================

    def get_history_entries(self, roid: str) -> List[HistoryEntry]:
        """History entries recorded for a domain ROID, oldest first."""
        return [e for e in self.history_entries.values() if e.parent_roid == roid]

    def get_domain(self, roid: str) -> Optional[DomainLifecycleState]:
        """Most recently imported state for a domain ROID."""
        for domain in reversed(self.domains):
            if domain.repo_id == roid:
                return domain
        return None

    @property
    def entity_count(self) -> int:
        return (
            len(self.domains) + len(self.billing_events)
            + len(self.poll_messages) + len(self.history_entries)
        )
