"""
Billing Repository

Writes autorenew billing recurrences and poll messages created by an import.
"""

import logging

from rde_import.database.connection import TransactionConnection
from rde_import.models import BillingRecurring, PollMessageAutorenew

logger = logging.getLogger("rde.database.billing")


class BillingRepository:
    """Repository for recurring billing events and poll messages."""

    def __init__(self, conn: TransactionConnection):
        """Initialize with transaction connection."""
        self.conn = conn

    async def insert_recurring(self, event: BillingRecurring) -> None:
        """
        Insert a recurring billing event.

        Args:
            event: Autorenew billing recurrence
        """
        sql = """
            INSERT INTO BILLING_RECURRENCES (
                BRC_ID, BRC_HISTORY_ID, BRC_REASON, BRC_FLAGS,
                BRC_TARGET_ROID, BRC_CLIENT_ID,
                BRC_EVENT_TIME, BRC_RECURRENCE_END_TIME
            ) VALUES (
                :id, :history_id, :reason, :flags,
                :target_roid, :client_id,
                :event_time, :end_time
            )
        """
        await self.conn.execute(sql, {
            "id": event.id,
            "history_id": event.parent_history_id,
            "reason": event.reason.value,
            "flags": ",".join(sorted(f.value for f in event.flags)),
            "target_roid": event.target_id,
            "client_id": event.client_id,
            "event_time": event.event_time,
            "end_time": event.recurrence_end_time,
        })
        logger.debug(f"Inserted billing recurrence {event.id} for {event.target_id}")

    async def insert_poll_message(self, message: PollMessageAutorenew) -> None:
        """
        Insert an autorenew poll message.

        Args:
            message: Autorenew poll message
        """
        sql = """
            INSERT INTO POLL_MESSAGES (
                PMS_ID, PMS_HISTORY_ID, PMS_TYPE, PMS_CLIENT_ID,
                PMS_TARGET_ROID, PMS_EVENT_TIME, PMS_MSG, PMS_AUTORENEW_END_TIME
            ) VALUES (
                :id, :history_id, 'Autorenew', :client_id,
                :target_roid, :event_time, :msg, :end_time
            )
        """
        await self.conn.execute(sql, {
            "id": message.id,
            "history_id": message.parent_history_id,
            "client_id": message.client_id,
            "target_roid": message.target_id,
            "event_time": message.event_time,
            "msg": message.msg,
            "end_time": message.autorenew_end_time,
        })
        logger.debug(f"Inserted poll message {message.id} for {message.client_id}")
