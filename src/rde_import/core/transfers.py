"""
Transfer State Reconstruction

Builds registry transfer data from escrowed trnData. The status is copied
verbatim; the requesting registrar gains the domain and the acting registrar
loses it.
"""

import logging
from typing import Optional

from rde_import.exceptions import MissingDataError, UnsupportedFeatureError
from rde_import.models import EscrowDomainRecord, TransferRecord, TransferStatus

logger = logging.getLogger("rde.transfer")


def reconstruct_transfer(record: EscrowDomainRecord) -> Optional[TransferRecord]:
    """
    Build transfer data, or None when the record carries no trnData.

    Raises:
        UnsupportedFeatureError: If the status is not a known transfer status
        MissingDataError: If a pending transfer has no expiration (acDate)
    """
    escrowed = record.transfer
    if escrowed is None:
        return None

    try:
        status = TransferStatus(escrowed.status)
    except ValueError as e:
        raise UnsupportedFeatureError(f"Unsupported transfer status: '{escrowed.status}'") from e

    if status is TransferStatus.PENDING and escrowed.action_date is None:
        raise MissingDataError(
            f"Pending transfer of domain '{record.name.lower()}' has no expiration date"
        )

    # The projected exDate of a pending transfer is not applied: the deposit
    # does not say whether it is already capped by the registration limit.
    if escrowed.expiration_date is not None:
        logger.debug(f"{record.name}: ignoring projected transfer expiration {escrowed.expiration_date}")

    return TransferRecord(
        transfer_status=status,
        gaining_client_id=escrowed.requesting_client_id,
        losing_client_id=escrowed.acting_client_id,
        transfer_request_time=escrowed.request_date,
        pending_transfer_expiration_time=escrowed.action_date,
    )
