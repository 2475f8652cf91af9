"""
Import History

Creates the audit record of a domain import. The escrow XML the record came
from is carried byte-for-byte, never re-serialized from the parsed record.
"""

from datetime import datetime
from typing import Optional

from rde_import.models import EscrowDomainRecord, HistoryEntry, HistoryType, Trid

IMPORT_REASON = "RDE Import"


def create_history_entry(
    record: EscrowDomainRecord,
    history_id: int,
    trid: Trid,
    modification_time: datetime,
    billing_event_id: Optional[int] = None,
    poll_message_id: Optional[int] = None
) -> HistoryEntry:
    """
    Create the RDE_IMPORT history entry for a domain.

    Imports act as superuser on behalf of the sponsor; they are never
    requested by a registrar.

    Args:
        record: Escrowed domain
        history_id: Id allocated for the entry
        trid: Transaction identifier of the import
        modification_time: Time of the import
        billing_event_id: Autorenew billing event created by the import
        poll_message_id: Autorenew poll message created by the import

    Returns:
        HistoryEntry
    """
    return HistoryEntry(
        id=history_id,
        type=HistoryType.RDE_IMPORT,
        parent_roid=record.roid,
        client_id=record.sponsor_client_id,
        modification_time=modification_time,
        by_superuser=True,
        requested_by_registrar=False,
        reason=IMPORT_REASON,
        xml_bytes=record.xml_bytes,
        trid=trid,
        billing_event_id=billing_event_id,
        poll_message_id=poll_message_id,
    )
