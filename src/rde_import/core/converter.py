"""
Escrow Domain Converter

Converts one escrowed domain into registry domain lifecycle state in a single
store transaction:

1. Resolve registrant, contacts and nameservers (fails before any write)
2. Reconstruct grace periods and transfer data
3. Create the autorenew billing recurrence and poll message
4. Create the RDE_IMPORT history entry referencing them
5. Build the domain and save all four entities together

Any failure aborts the transaction; nothing from the record is persisted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import FrozenSet, Optional, Tuple

from rde_import.core.billing import (
    create_autorenew_billing_event,
    create_autorenew_poll_message,
)
from rde_import.core.grace_periods import reconstruct_grace_periods
from rde_import.core.history import create_history_entry
from rde_import.core.resolver import ResolvedReferences, resolve_references
from rde_import.core.transfers import reconstruct_transfer
from rde_import.database.store import RegistryStore
from rde_import.exceptions import RdeImportError
from rde_import.models import (
    BillingRecurring,
    DomainLifecycleState,
    EscrowDomainRecord,
    GracePeriod,
    HistoryEntry,
    PollMessageAutorenew,
    StatusValue,
    TransferRecord,
    Trid,
)
from rde_import.utils.password_utils import generate_auth_info
from rde_import.utils.trid import TridGenerator

logger = logging.getLogger("rde.converter")

INACTIVE_STATUS_VALUES = frozenset({StatusValue.INACTIVE})
ACTIVE_STATUS_VALUES = frozenset({StatusValue.OK})

_default_trid_generator = TridGenerator()


def canonical_domain_name(name: str) -> str:
    """Canonical (lowercase, no trailing dot) form of a domain name."""
    return name.strip().rstrip(".").lower()


def derive_status_values(references: ResolvedReferences) -> FrozenSet[StatusValue]:
    """A domain with no nameservers is INACTIVE."""
    if not references.nameservers:
        return INACTIVE_STATUS_VALUES
    return ACTIVE_STATUS_VALUES


@dataclass(frozen=True)
class DomainImportResult:
    """Domain state plus the side entities created with it."""
    domain: DomainLifecycleState
    billing_event: BillingRecurring
    poll_message: PollMessageAutorenew
    history_entry: HistoryEntry


class DomainImportConverter:
    """
    Converts escrowed domains against a registry store.

    One converter can run many conversions concurrently; each conversion
    holds its own transaction.
    """

    def __init__(self, store: RegistryStore, trid_generator: Optional[TridGenerator] = None):
        """
        Initialize converter.

        Args:
            store: Transactional registry store
            trid_generator: Server TRID source (shared default if omitted)
        """
        self.store = store
        self.trid_generator = trid_generator or _default_trid_generator

    async def convert(self, record: EscrowDomainRecord) -> DomainImportResult:
        """
        Convert and persist one escrowed domain.

        Args:
            record: Escrowed domain record

        Returns:
            DomainImportResult with everything that was committed

        Raises:
            MissingDataError: If a required field is absent
            ReferenceNotFoundError: If a contact or host does not resolve
            UnsupportedFeatureError: If the record uses an unsupported feature
            ConflictError: If the store detected a concurrent modification
        """
        name = canonical_domain_name(record.name)

        try:
            async with self.store.transaction() as tx:
                references = await resolve_references(record, tx)
                grace_periods = reconstruct_grace_periods(record)
                transfer_data = reconstruct_transfer(record)

                history_id = await tx.allocate_id()
                billing_event = create_autorenew_billing_event(
                    record, await tx.allocate_id(), history_id
                )
                poll_message = create_autorenew_poll_message(
                    record, await tx.allocate_id(), history_id
                )

                now = datetime.now(timezone.utc)
                history_entry = create_history_entry(
                    record,
                    history_id,
                    Trid(server_trid=self.trid_generator.generate(now)),
                    now,
                    billing_event_id=billing_event.id,
                    poll_message_id=poll_message.id,
                )

                domain = self._build_domain(
                    record, name, references, grace_periods, transfer_data,
                    billing_event, poll_message
                )

                await tx.save(domain, billing_event, poll_message, history_entry)

        except RdeImportError as e:
            logger.warning(f"Import of domain {name} ({record.roid}) failed: {e}")
            raise

        logger.info(
            f"Imported domain {name} ({record.roid}) for {record.sponsor_client_id}, "
            f"trid={history_entry.trid.server_trid}"
        )

        return DomainImportResult(
            domain=domain,
            billing_event=billing_event,
            poll_message=poll_message,
            history_entry=history_entry,
        )

    @staticmethod
    def _build_domain(
        record: EscrowDomainRecord,
        name: str,
        references: ResolvedReferences,
        grace_periods: Tuple[GracePeriod, ...],
        transfer_data: Optional[TransferRecord],
        billing_event: BillingRecurring,
        poll_message: PollMessageAutorenew
    ) -> DomainLifecycleState:
        auth_info = record.auth_info
        if not auth_info:
            logger.debug(f"No auth info escrowed for {name}, generating one")
            auth_info = generate_auth_info()

        return DomainLifecycleState(
            fully_qualified_domain_name=name,
            repo_id=record.roid,
            status_values=derive_status_values(references),
            registrant=references.registrant,
            contacts=references.contacts,
            nameservers=references.nameservers,
            current_sponsor_client_id=record.sponsor_client_id,
            creation_client_id=record.creation_client_id,
            creation_time=record.creation_time,
            registration_expiration_time=billing_event.event_time,
            last_epp_update_client_id=record.last_update_client_id,
            last_epp_update_time=record.last_update_time,
            last_transfer_time=record.last_transfer_time,
            grace_periods=grace_periods,
            transfer_data=transfer_data,
            auth_info=auth_info,
            ds_data=frozenset(record.ds_data),
            autorenew_billing_event=billing_event.id,
            autorenew_poll_message=poll_message.id,
        )


async def convert_domain(
    record: EscrowDomainRecord,
    store: RegistryStore,
    trid_generator: Optional[TridGenerator] = None
) -> DomainLifecycleState:
    """
    Convert one escrowed domain and return its registry state.

    Convenience wrapper around DomainImportConverter.convert().
    """
    result = await DomainImportConverter(store, trid_generator).convert(record)
    return result.domain
