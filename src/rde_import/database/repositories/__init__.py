"""Database repository classes"""

from rde_import.database.repositories.billing_repo import BillingRepository
from rde_import.database.repositories.contact_repo import ContactRepository
from rde_import.database.repositories.domain_repo import DomainRepository
from rde_import.database.repositories.history_repo import HistoryRepository
from rde_import.database.repositories.host_repo import HostRepository

__all__ = [
    "BillingRepository",
    "ContactRepository",
    "DomainRepository",
    "HistoryRepository",
    "HostRepository",
]
