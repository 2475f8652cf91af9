"""
Registry Store Interface

Abstract transactional store consumed by the import converter.

A conversion opens one transaction, resolves contact and host references
through it, allocates entity ids and saves every entity it creates. The
transaction commits on clean exit of the context manager and aborts on any
exception, so nothing from a failed conversion is ever visible.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Optional

from rde_import.models import ContactRef, HostRef


class StoreTransaction(ABC):
    """Handle for one atomic unit of work against the store."""

    @abstractmethod
    async def resolve_contact(self, contact_id: str) -> Optional[ContactRef]:
        """Look up a contact by its escrow id; None if absent."""

    @abstractmethod
    async def resolve_host(self, host_name: str) -> Optional[HostRef]:
        """Look up a host by its fully qualified name; None if absent."""

    @abstractmethod
    async def allocate_id(self) -> int:
        """Allocate a unique id for a new entity."""

    @abstractmethod
    async def save(self, *entities) -> None:
        """
        Stage entities for writing.

        Writes become visible only when the transaction commits.
        """


class RegistryStore(ABC):
    """Transactional registry store."""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[StoreTransaction]:
        """
        Open a transaction.

        Usage:
            async with store.transaction() as tx:
                ref = await tx.resolve_contact("jd1234")
                await tx.save(entity)
                # commits on exit, aborts on exception
        """
