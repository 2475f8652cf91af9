"""
Autorenew Billing and Poll Synthesis

Every imported domain gets an open-ended autorenew billing recurrence and a
matching autorenew poll message for its sponsor, both firing at the domain's
current expiration.
"""

from datetime import datetime

from rde_import.exceptions import MissingDataError
from rde_import.models import (
    END_OF_TIME,
    BillingFlag,
    BillingReason,
    BillingRecurring,
    EscrowDomainRecord,
    PollMessageAutorenew,
)

AUTORENEW_MESSAGE = "Domain was auto-renewed."


def _expiration_time(record: EscrowDomainRecord) -> datetime:
    if record.expiration_time is None:
        raise MissingDataError(f"Expiration date is missing for domain '{record.name.lower()}'")
    return record.expiration_time


def create_autorenew_billing_event(
    record: EscrowDomainRecord,
    billing_id: int,
    history_id: int
) -> BillingRecurring:
    """
    Create the recurring autorenew billing event.

    Args:
        record: Escrowed domain
        billing_id: Id allocated for the event
        history_id: Id of the import history entry

    Returns:
        BillingRecurring ending at END_OF_TIME
    """
    return BillingRecurring(
        id=billing_id,
        parent_history_id=history_id,
        reason=BillingReason.RENEW,
        flags=frozenset({BillingFlag.AUTO_RENEW}),
        target_id=record.roid,
        client_id=record.sponsor_client_id,
        event_time=_expiration_time(record),
        recurrence_end_time=END_OF_TIME,
    )


def create_autorenew_poll_message(
    record: EscrowDomainRecord,
    poll_id: int,
    history_id: int
) -> PollMessageAutorenew:
    """Create the autorenew poll message for the sponsoring registrar."""
    return PollMessageAutorenew(
        id=poll_id,
        parent_history_id=history_id,
        client_id=record.sponsor_client_id,
        target_id=record.roid,
        event_time=_expiration_time(record),
        msg=AUTORENEW_MESSAGE,
        autorenew_end_time=END_OF_TIME,
    )
