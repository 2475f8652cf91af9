"""
Grace Period Reconstruction

Maps escrowed rgpStatus markers to registry grace periods. The expiration of
each period is its base date (creation for ADD, last update otherwise) plus a
fixed offset:

    ADD             crDate + 5 days
    AUTO_RENEW      upDate + 45 days
    REDEMPTION      upDate + 30 days
    RENEW           upDate + 5 days
    TRANSFER        upDate + 5 days
    PENDING_DELETE  upDate + 5 days

PENDING_RESTORE has no registry representation and is rejected.
"""

import logging
from typing import Dict, NamedTuple, Tuple

from dateutil.relativedelta import relativedelta

from rde_import.exceptions import MissingDataError, UnsupportedFeatureError
from rde_import.models import (
    EscrowDomainRecord,
    EscrowGraceMarker,
    GracePeriod,
    GracePeriodStatus,
    RgpStatus,
)

logger = logging.getLogger("rde.grace")


class GraceRule(NamedTuple):
    type: GracePeriodStatus
    base_date: str  # EscrowDomainRecord attribute
    offset: relativedelta


GRACE_PERIOD_RULES: Dict[RgpStatus, GraceRule] = {
    RgpStatus.ADD: GraceRule(GracePeriodStatus.ADD, "creation_time", relativedelta(days=5)),
    RgpStatus.AUTO_RENEW: GraceRule(GracePeriodStatus.AUTO_RENEW, "last_update_time", relativedelta(days=45)),
    RgpStatus.REDEMPTION: GraceRule(GracePeriodStatus.REDEMPTION, "last_update_time", relativedelta(days=30)),
    RgpStatus.RENEW: GraceRule(GracePeriodStatus.RENEW, "last_update_time", relativedelta(days=5)),
    RgpStatus.TRANSFER: GraceRule(GracePeriodStatus.TRANSFER, "last_update_time", relativedelta(days=5)),
    RgpStatus.PENDING_DELETE: GraceRule(GracePeriodStatus.PENDING_DELETE, "last_update_time", relativedelta(days=5)),
}


def reconstruct_grace_period(marker: EscrowGraceMarker, record: EscrowDomainRecord) -> GracePeriod:
    """
    Build the grace period for one escrowed marker.

    Raises:
        UnsupportedFeatureError: For markers with no registry equivalent
        MissingDataError: If the marker's base date is absent from the record
    """
    rule = GRACE_PERIOD_RULES.get(marker.status)
    if rule is None:
        raise UnsupportedFeatureError(f"Unsupported grace period status: {marker.status.name}")

    base = getattr(record, rule.base_date)
    if base is None:
        raise MissingDataError(
            f"Grace period {rule.type.name} for domain '{record.name.lower()}' "
            f"requires {rule.base_date}"
        )

    return GracePeriod(
        type=rule.type,
        client_id=marker.client_id or record.sponsor_client_id,
        expiration_time=base + rule.offset,
    )


def reconstruct_grace_periods(record: EscrowDomainRecord) -> Tuple[GracePeriod, ...]:
    """Build grace periods for every marker on the record, in order."""
    periods = tuple(reconstruct_grace_period(m, record) for m in record.grace_markers)
    if periods:
        logger.debug(f"{record.name}: {', '.join(p.type.name for p in periods)}")
    return periods
