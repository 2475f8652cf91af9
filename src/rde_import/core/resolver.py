"""
Reference Resolver

Resolves the contact and host references an escrowed domain declares by name
into store references. Every lookup goes through the caller's transaction so
resolution and writes see one consistent snapshot.

Resolution is strict: the first reference that does not resolve aborts the
import of the record.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet

from rde_import.database.store import StoreTransaction
from rde_import.exceptions import (
    MissingDataError,
    ReferenceNotFoundError,
    UnsupportedFeatureError,
)
from rde_import.models import (
    ContactRef,
    ContactType,
    DesignatedContact,
    EscrowDomainRecord,
    HostRef,
)

logger = logging.getLogger("rde.resolver")

# Escrow contact type -> designated contact role
CONTACT_TYPES = {
    "admin": ContactType.ADMIN,
    "billing": ContactType.BILLING,
    "tech": ContactType.TECH,
    "registrant": ContactType.REGISTRANT,
}


@dataclass(frozen=True)
class ResolvedReferences:
    """Everything a domain points at, resolved."""
    registrant: ContactRef
    contacts: FrozenSet[DesignatedContact]
    nameservers: FrozenSet[HostRef]


async def resolve_registrant(record: EscrowDomainRecord, tx: StoreTransaction) -> ContactRef:
    """
    Resolve the mandatory registrant.

    Raises:
        MissingDataError: If the record declares no registrant
        ReferenceNotFoundError: If the registrant does not exist
    """
    if not record.registrant:
        raise MissingDataError(f"Registrant is missing for domain '{record.name.lower()}'")

    ref = await tx.resolve_contact(record.registrant)
    if ref is None:
        raise ReferenceNotFoundError(
            f"Registrant not found: '{record.registrant}'", identifier=record.registrant
        )
    return ref


async def resolve_contacts(record: EscrowDomainRecord, tx: StoreTransaction) -> FrozenSet[DesignatedContact]:
    """
    Resolve designated contacts.

    Raises:
        UnsupportedFeatureError: If a contact type is not a known role
        ReferenceNotFoundError: If a contact does not exist
    """
    designated = set()
    for contact in record.contacts:
        contact_type = CONTACT_TYPES.get(contact.type.lower())
        if contact_type is None:
            raise UnsupportedFeatureError(f"Unsupported contact type: '{contact.type}'")

        ref = await tx.resolve_contact(contact.contact_id)
        if ref is None:
            raise ReferenceNotFoundError(
                f"Contact not found: '{contact.contact_id}'", identifier=contact.contact_id
            )
        designated.add(DesignatedContact(type=contact_type, contact=ref))
    return frozenset(designated)


async def resolve_nameservers(record: EscrowDomainRecord, tx: StoreTransaction) -> FrozenSet[HostRef]:
    """
    Resolve nameservers declared by object (hostObj).

    Raises:
        UnsupportedFeatureError: If any nameserver is declared inline (hostAttr)
        ReferenceNotFoundError: If a host does not exist
    """
    if record.host_attrs:
        raise UnsupportedFeatureError("Host attributes are not yet supported")

    hosts = set()
    for host_name in record.nameservers:
        ref = await tx.resolve_host(host_name)
        if ref is None:
            raise ReferenceNotFoundError(
                f"Host not found with name '{host_name}'", identifier=host_name
            )
        hosts.add(ref)
    return frozenset(hosts)


async def resolve_references(record: EscrowDomainRecord, tx: StoreTransaction) -> ResolvedReferences:
    """Resolve registrant, contacts and nameservers, in that order."""
    references = ResolvedReferences(
        registrant=await resolve_registrant(record, tx),
        contacts=await resolve_contacts(record, tx),
        nameservers=await resolve_nameservers(record, tx),
    )
    logger.debug(
        f"Resolved references for {record.name}: {len(references.contacts)} contacts, "
        f"{len(references.nameservers)} nameservers"
    )
    return references
