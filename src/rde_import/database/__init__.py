"""Registry store implementations"""

from rde_import.database.memory import MemoryStore
from rde_import.database.store import RegistryStore, StoreTransaction

__all__ = [
    "MemoryStore",
    "RegistryStore",
    "StoreTransaction",
]
