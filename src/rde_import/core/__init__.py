"""Escrow import engine"""

from rde_import.core.converter import (
    DomainImportConverter,
    DomainImportResult,
    convert_domain,
)
from rde_import.core.xml_processor import EscrowDeposit, EscrowXMLProcessor, get_xml_processor

__all__ = [
    "DomainImportConverter",
    "DomainImportResult",
    "EscrowDeposit",
    "EscrowXMLProcessor",
    "convert_domain",
    "get_xml_processor",
]
