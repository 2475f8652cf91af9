"""
RDE Import Models

Immutable dataclasses for escrowed domain records (input) and the registry's
internal domain lifecycle entities (output).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Optional, Tuple


# Sentinel for open-ended recurrences ("until cancelled")
END_OF_TIME = datetime.max.replace(tzinfo=timezone.utc)


# ============================================================================
# Enumerations
# ============================================================================

class StatusValue(Enum):
    """EPP object status values (RFC 5731)."""
    OK = "ok"
    INACTIVE = "inactive"
    CLIENT_DELETE_PROHIBITED = "clientDeleteProhibited"
    CLIENT_HOLD = "clientHold"
    CLIENT_RENEW_PROHIBITED = "clientRenewProhibited"
    CLIENT_TRANSFER_PROHIBITED = "clientTransferProhibited"
    CLIENT_UPDATE_PROHIBITED = "clientUpdateProhibited"
    PENDING_DELETE = "pendingDelete"
    PENDING_TRANSFER = "pendingTransfer"
    SERVER_HOLD = "serverHold"


class RgpStatus(Enum):
    """Grace markers as they appear in an escrow deposit (rgpStatus s=...)."""
    ADD = "addPeriod"
    AUTO_RENEW = "autoRenewPeriod"
    REDEMPTION = "redemptionPeriod"
    RENEW = "renewPeriod"
    TRANSFER = "transferPeriod"
    PENDING_DELETE = "pendingDelete"
    PENDING_RESTORE = "pendingRestore"


class GracePeriodStatus(Enum):
    """Grace period kinds the registry can represent."""
    ADD = "addPeriod"
    AUTO_RENEW = "autoRenewPeriod"
    REDEMPTION = "redemptionPeriod"
    RENEW = "renewPeriod"
    TRANSFER = "transferPeriod"
    PENDING_DELETE = "pendingDelete"


class TransferStatus(Enum):
    """Transfer states (RFC 5730 trStatus)."""
    PENDING = "pending"
    CLIENT_APPROVED = "clientApproved"
    CLIENT_CANCELLED = "clientCancelled"
    CLIENT_REJECTED = "clientRejected"
    SERVER_APPROVED = "serverApproved"
    SERVER_CANCELLED = "serverCancelled"


class ContactType(Enum):
    """Domain contact roles."""
    ADMIN = "admin"
    BILLING = "billing"
    TECH = "tech"
    REGISTRANT = "registrant"


class BillingReason(Enum):
    RENEW = "RENEW"


class BillingFlag(Enum):
    AUTO_RENEW = "AUTO_RENEW"


class HistoryType(Enum):
    RDE_IMPORT = "RDE_IMPORT"


# ============================================================================
# Escrow (input) Models
# ============================================================================

@dataclass(frozen=True)
class EscrowContact:
    """Contact association declared on an escrowed domain."""
    type: str  # admin/billing/tech as written in the deposit
    contact_id: str


@dataclass(frozen=True)
class EscrowHostAttr:
    """Nameserver declared inline (hostAttr) rather than by reference."""
    name: str
    addresses: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EscrowGraceMarker:
    """rgpStatus marker; client_id overrides the sponsor when present."""
    status: RgpStatus
    client_id: Optional[str] = None


@dataclass(frozen=True)
class EscrowTransfer:
    """Escrowed transfer data (rdeDomain:trnData)."""
    status: str
    requesting_client_id: str  # reRr, gaining registrar
    request_date: datetime
    acting_client_id: str  # acRr, losing registrar
    action_date: Optional[datetime] = None
    expiration_date: Optional[datetime] = None  # projected exDate


@dataclass(frozen=True)
class DelegationSignerData:
    """secDNS dsData entry."""
    key_tag: int
    algorithm: int
    digest_type: int
    digest: bytes


@dataclass(frozen=True)
class EscrowDomainRecord:
    """One domain's escrowed state, as parsed from a deposit."""
    name: str
    roid: str
    sponsor_client_id: str  # clID
    creation_time: Optional[datetime] = None
    creation_client_id: Optional[str] = None  # crRr
    expiration_time: Optional[datetime] = None
    last_update_time: Optional[datetime] = None
    last_update_client_id: Optional[str] = None  # upRr
    last_transfer_time: Optional[datetime] = None
    registrant: Optional[str] = None
    contacts: Tuple[EscrowContact, ...] = ()
    nameservers: Tuple[str, ...] = ()
    host_attrs: Tuple[EscrowHostAttr, ...] = ()
    statuses: Tuple[str, ...] = ()
    auth_info: Optional[str] = None
    grace_markers: Tuple[EscrowGraceMarker, ...] = ()
    transfer: Optional[EscrowTransfer] = None
    ds_data: Tuple[DelegationSignerData, ...] = ()
    xml_bytes: bytes = field(default=b"", repr=False)


# ============================================================================
# Reference Models
# ============================================================================

@dataclass(frozen=True)
class ContactRef:
    """Resolved contact: escrow id plus the store's ROID."""
    contact_id: str
    roid: str


@dataclass(frozen=True)
class HostRef:
    """Resolved host: name plus the store's ROID."""
    host_name: str
    roid: str


@dataclass(frozen=True)
class DesignatedContact:
    type: ContactType
    contact: ContactRef


# ============================================================================
# Lifecycle (output) Models
# ============================================================================

@dataclass(frozen=True)
class GracePeriod:
    type: GracePeriodStatus
    client_id: str
    expiration_time: datetime


@dataclass(frozen=True)
class TransferRecord:
    """
    Transfer lifecycle data.

    transferred_registration_expiration_time is never populated on import:
    the deposit does not carry enough to compute a capped projection.
    """
    transfer_status: TransferStatus
    gaining_client_id: str
    losing_client_id: str
    transfer_request_time: datetime
    pending_transfer_expiration_time: Optional[datetime] = None
    transferred_registration_expiration_time: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.transfer_status is TransferStatus.PENDING


@dataclass(frozen=True)
class BillingRecurring:
    """Recurring billing obligation (auto-renew)."""
    id: int
    parent_history_id: int
    reason: BillingReason
    flags: FrozenSet[BillingFlag]
    target_id: str  # domain ROID
    client_id: str
    event_time: datetime
    recurrence_end_time: datetime = END_OF_TIME


@dataclass(frozen=True)
class PollMessageAutorenew:
    """Auto-renew poll message queued for the sponsoring registrar."""
    id: int
    parent_history_id: int
    client_id: str
    target_id: str  # domain ROID
    event_time: datetime
    msg: str
    autorenew_end_time: datetime = END_OF_TIME


@dataclass(frozen=True)
class Trid:
    """Transaction identifier pair."""
    server_trid: str
    client_trid: Optional[str] = None


@dataclass(frozen=True)
class HistoryEntry:
    """Audit record of one import."""
    id: int
    type: HistoryType
    parent_roid: str
    client_id: str
    modification_time: datetime
    by_superuser: bool
    requested_by_registrar: bool
    reason: str
    xml_bytes: bytes = field(repr=False)
    trid: Trid
    billing_event_id: Optional[int] = None
    poll_message_id: Optional[int] = None


@dataclass(frozen=True)
class DomainLifecycleState:
    """Domain state as held by the registry after import."""
    fully_qualified_domain_name: str
    repo_id: str
    status_values: FrozenSet[StatusValue]
    registrant: ContactRef
    contacts: FrozenSet[DesignatedContact]
    nameservers: FrozenSet[HostRef]
    current_sponsor_client_id: str
    creation_client_id: Optional[str]
    creation_time: Optional[datetime]
    registration_expiration_time: datetime
    last_epp_update_client_id: Optional[str]
    last_epp_update_time: Optional[datetime]
    last_transfer_time: Optional[datetime]
    grace_periods: Tuple[GracePeriod, ...]
    transfer_data: Optional[TransferRecord]
    auth_info: str = field(repr=False)
    ds_data: FrozenSet[DelegationSignerData]
    autorenew_billing_event: int
    autorenew_poll_message: int
