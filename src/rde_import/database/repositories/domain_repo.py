"""
Domain Repository

Writes an imported domain's lifecycle state:
- registry object and domain rows
- registration period
- contacts, nameservers and statuses
- grace periods, transfer data and DS records
- the import link row tying the domain to its autorenew records
"""

import logging
from typing import Any, Dict

from rde_import.database.connection import TransactionConnection
from rde_import.models import DomainLifecycleState

logger = logging.getLogger("rde.database.domain")


def extract_zone(domain_name: str) -> str:
    """Extract zone from domain name."""
    parts = domain_name.lower().split(".")
    if len(parts) >= 2:
        return ".".join(parts[1:])
    return ""


def extract_label(domain_name: str) -> str:
    """Extract label (first part) from domain name."""
    return domain_name.lower().split(".")[0]


class DomainRepository:
    """
    Repository for imported domain writes.

    All statements run on the caller's transaction connection.
    """

    def __init__(self, conn: TransactionConnection):
        """Initialize with transaction connection."""
        self.conn = conn

    async def insert(self, domain: DomainLifecycleState) -> None:
        """
        Insert a fully converted domain.

        Args:
            domain: Converted domain lifecycle state
        """
        roid = domain.repo_id
        name = domain.fully_qualified_domain_name

        # Insert into REGISTRY_OBJECTS
        obj_sql = """
            INSERT INTO REGISTRY_OBJECTS (
                OBJ_ROID, OBJ_TYPE, OBJ_STATUS, OBJ_PASSWORD,
                OBJ_CREATE_DATE, OBJ_MANAGE_ACCOUNT_ID,
                OBJ_UPDATE_DATE, OBJ_TRANSFER_DATE, OBJ_LOCKED
            ) VALUES (
                :roid, 'Domain', 'Registered', :auth_info,
                :create_date,
                (SELECT ACC_ID FROM ACCOUNTS WHERE ACC_CLIENT_ID = :client_id),
                :update_date, :transfer_date, 'N'
            )
        """
        await self.conn.execute(obj_sql, {
            "roid": roid,
            "auth_info": domain.auth_info,
            "create_date": domain.creation_time,
            "client_id": domain.current_sponsor_client_id,
            "update_date": domain.last_epp_update_time,
            "transfer_date": domain.last_transfer_time,
        })

        # Insert into DOMAINS first (without registration ID due to circular FK)
        dom_sql = """
            INSERT INTO DOMAINS (
                DOM_ROID, DOM_NAME, DOM_LABEL, DOM_CANONICAL_FORM,
                DOM_ZONE, DOM_REGISTRANT_ROID, DOM_REGISTRATION_ID,
                DOM_DNS_QUALIFIED, DOM_DNS_HOLD, DOM_ACTIVE_INDICATOR
            ) VALUES (
                :roid, :domain_name, :label, :domain_name,
                :zone, :registrant_roid, NULL,
                :dns_qualified, 'N', :roid
            )
        """
        await self.conn.execute(dom_sql, {
            "roid": roid,
            "domain_name": name,
            "label": extract_label(name),
            "zone": extract_zone(name),
            "registrant_roid": domain.registrant.roid,
            "dns_qualified": "Y" if domain.nameservers else "N",
        })

        # Registration period as escrowed (start = creation, end = expiry)
        reg_id = await self.conn.get_next_sequence("DRE_ID_SEQ")
        reg_sql = """
            INSERT INTO DOMAIN_REGISTRATIONS (
                DRE_ID, DRE_ROID, DRE_SEQ, DRE_PERIOD, DRE_UNIT,
                DRE_REQUEST_DATE, DRE_START_DATE, DRE_EXPIRE_DATE, DRE_STATUS
            ) VALUES (
                :reg_id, :roid, 1, NULL, 'y',
                :start_date, :start_date, :expire_date, 'approved'
            )
        """
        await self.conn.execute(reg_sql, {
            "reg_id": reg_id,
            "roid": roid,
            "start_date": domain.creation_time,
            "expire_date": domain.registration_expiration_time,
        })
        await self.conn.execute(
            "UPDATE DOMAINS SET DOM_REGISTRATION_ID = :reg_id WHERE DOM_ROID = :roid",
            {"reg_id": reg_id, "roid": roid}
        )

        await self.conn.execute_many(
            """
            INSERT INTO DOMAIN_CONTACTS (
                DCN_DOMAIN_ROID, DCN_CONTACT_ROID, DCN_TYPE
            ) VALUES (
                :domain_roid, :contact_roid, :contact_type
            )
            """,
            [
                {
                    "domain_roid": roid,
                    "contact_roid": c.contact.roid,
                    "contact_type": c.type.value,
                }
                for c in domain.contacts
            ]
        )

        await self.conn.execute_many(
            """
            INSERT INTO DOMAIN_NAMESERVERS (
                DNS_DOMAIN_ROID, DNS_HOST_ROID
            ) VALUES (
                :domain_roid, :host_roid
            )
            """,
            [{"domain_roid": roid, "host_roid": h.roid} for h in domain.nameservers]
        )

        await self.conn.execute_many(
            "INSERT INTO EPP_DOMAIN_STATUSES (EDS_ROID, EDS_STATUS) VALUES (:roid, :status)",
            [{"roid": roid, "status": s.value} for s in domain.status_values]
        )

        await self.conn.execute_many(
            """
            INSERT INTO DOMAIN_GRACE_PERIODS (
                DGP_ROID, DGP_TYPE, DGP_CLIENT_ID, DGP_EXPIRE_TIME
            ) VALUES (
                :roid, :type, :client_id, :expire_time
            )
            """,
            [
                {
                    "roid": roid,
                    "type": g.type.value,
                    "client_id": g.client_id,
                    "expire_time": g.expiration_time,
                }
                for g in domain.grace_periods
            ]
        )

        if domain.transfer_data is not None:
            await self._insert_transfer(domain)

        await self.conn.execute_many(
            """
            INSERT INTO DOMAIN_SECDNS (
                DSD_ROID, DSD_KEY_TAG, DSD_ALG, DSD_DIGEST_TYPE, DSD_DIGEST
            ) VALUES (
                :roid, :key_tag, :alg, :digest_type, :digest
            )
            """,
            [
                {
                    "roid": roid,
                    "key_tag": ds.key_tag,
                    "alg": ds.algorithm,
                    "digest_type": ds.digest_type,
                    "digest": ds.digest.hex().upper(),
                }
                for ds in domain.ds_data
            ]
        )

        link_sql = """
            INSERT INTO RDE_DOMAIN_IMPORTS (
                RDI_ROID, RDI_SPONSOR_CLID, RDI_CREATE_CLID,
                RDI_UPDATE_CLID, RDI_AUTORENEW_BILLING_ID, RDI_AUTORENEW_POLL_ID
            ) VALUES (
                :roid, :sponsor, :creator,
                :updater, :billing_id, :poll_id
            )
        """
        await self.conn.execute(link_sql, {
            "roid": roid,
            "sponsor": domain.current_sponsor_client_id,
            "creator": domain.creation_client_id,
            "updater": domain.last_epp_update_client_id,
            "billing_id": domain.autorenew_billing_event,
            "poll_id": domain.autorenew_poll_message,
        })

        logger.debug(f"Inserted domain {name} (ROID: {roid})")

    async def _insert_transfer(self, domain: DomainLifecycleState) -> None:
        transfer = domain.transfer_data
        params: Dict[str, Any] = {
            "roid": domain.repo_id,
            "status": transfer.transfer_status.value,
            "gaining": transfer.gaining_client_id,
            "losing": transfer.losing_client_id,
            "request_time": transfer.transfer_request_time,
            "pending_expire": transfer.pending_transfer_expiration_time,
        }
        sql = """
            INSERT INTO RDE_DOMAIN_TRANSFERS (
                RDT_ROID, RDT_STATUS, RDT_GAINING_CLID, RDT_LOSING_CLID,
                RDT_REQUEST_TIME, RDT_PENDING_EXPIRE_TIME
            ) VALUES (
                :roid, :status, :gaining, :losing,
                :request_time, :pending_expire
            )
        """
        await self.conn.execute(sql, params)
