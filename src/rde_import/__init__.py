"""
RDE Import

Converts registry data escrow (RDE) domain records into registry domain
lifecycle state, with the billing, poll and history entities an import
creates.
"""

__version__ = "1.0.0"

from rde_import.core.converter import DomainImportConverter, DomainImportResult, convert_domain
from rde_import.core.xml_processor import EscrowXMLProcessor, get_xml_processor
from rde_import.database.memory import MemoryStore
from rde_import.exceptions import (
    ConflictError,
    EscrowXMLError,
    MissingDataError,
    RdeImportError,
    ReferenceNotFoundError,
    UnsupportedFeatureError,
)

__all__ = [
    "ConflictError",
    "DomainImportConverter",
    "DomainImportResult",
    "EscrowXMLError",
    "EscrowXMLProcessor",
    "MemoryStore",
    "MissingDataError",
    "RdeImportError",
    "ReferenceNotFoundError",
    "UnsupportedFeatureError",
    "convert_domain",
    "get_xml_processor",
]
