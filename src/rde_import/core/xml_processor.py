"""
Escrow XML Processor

Parses RDE (registry data escrow) XML into typed escrow records.
Uses lxml with a parser hardened against entity expansion and network access.

Each domain record keeps the bytes it was parsed from so the import history
can carry them unmodified.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from dateutil.parser import isoparse
from lxml import etree

from rde_import.exceptions import EscrowXMLError
from rde_import.models import (
    ContactRef,
    DelegationSignerData,
    EscrowContact,
    EscrowDomainRecord,
    EscrowGraceMarker,
    EscrowHostAttr,
    EscrowTransfer,
    HostRef,
    RgpStatus,
)

logger = logging.getLogger("rde.xml")

# RDE Namespaces
RDE_NS = "urn:ietf:params:xml:ns:rde-1.0"
RDE_DOMAIN_NS = "urn:ietf:params:xml:ns:rdeDomain-1.0"
RDE_CONTACT_NS = "urn:ietf:params:xml:ns:rdeContact-1.0"
RDE_HOST_NS = "urn:ietf:params:xml:ns:rdeHost-1.0"

# EPP Namespaces reused inside escrow objects
DOMAIN_NS = "urn:ietf:params:xml:ns:domain-1.0"
SECDNS_NS = "urn:ietf:params:xml:ns:secDNS-1.1"
RGP_NS = "urn:ietf:params:xml:ns:rgp-1.0"

# Namespace map for XPath queries
NSMAP = {
    "rde": RDE_NS,
    "rdeDomain": RDE_DOMAIN_NS,
    "rdeContact": RDE_CONTACT_NS,
    "rdeHost": RDE_HOST_NS,
    "domain": DOMAIN_NS,
    "secDNS": SECDNS_NS,
    "rgp": RGP_NS,
}

DOMAIN_TAG = f"{{{RDE_DOMAIN_NS}}}domain"
DEPOSIT_TAG = f"{{{RDE_NS}}}deposit"


@dataclass
class EscrowDeposit:
    """Parsed deposit: domains plus the contacts and hosts it escrows."""
    deposit_id: Optional[str] = None
    watermark: Optional[datetime] = None
    domains: List[EscrowDomainRecord] = field(default_factory=list)
    contacts: List[ContactRef] = field(default_factory=list)
    hosts: List[HostRef] = field(default_factory=list)


def _parse_datetime(text: Optional[str], element: str) -> Optional[datetime]:
    """Parse an escrow timestamp as an aware UTC datetime."""
    if not text:
        return None
    try:
        value = isoparse(text.strip())
    except ValueError as e:
        raise EscrowXMLError(f"Invalid {element} timestamp '{text}': {e}") from e
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _find_text(elem: etree._Element, path: str) -> Optional[str]:
    """Find element and return stripped text."""
    found = elem.find(path, NSMAP)
    if found is not None and found.text:
        return found.text.strip()
    return None


def _require_text(elem: etree._Element, path: str) -> str:
    value = _find_text(elem, path)
    if value is None:
        raise EscrowXMLError(f"Missing <{path}> element")
    return value


class EscrowXMLProcessor:
    """
    Processes RDE escrow XML.

    Handles parsing of:
    - single domain fragments (<rdeDomain:domain> root)
    - full deposits (<rde:deposit> root) with domains, contacts and hosts
    """

    def __init__(self):
        """Initialize XML processor with parser configuration."""
        self._parser = etree.XMLParser(
            remove_blank_text=True,
            remove_comments=True,
            resolve_entities=False,
            no_network=True,
            huge_tree=False
        )
        # Deposits keep comments and whitespace so each domain serializes as escrowed
        self._deposit_parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            huge_tree=False
        )

    def _parse_xml(self, xml_data: bytes, parser: Optional[etree.XMLParser] = None) -> etree._Element:
        try:
            return etree.fromstring(xml_data, parser=parser or self._parser)
        except etree.XMLSyntaxError as e:
            logger.error(f"XML syntax error: {e}")
            raise EscrowXMLError(f"Invalid XML: {e}") from e

    def parse_domain(self, xml_data: bytes) -> EscrowDomainRecord:
        """
        Parse a single <rdeDomain:domain> fragment.

        Args:
            xml_data: Raw XML bytes

        Returns:
            EscrowDomainRecord carrying xml_data unmodified

        Raises:
            EscrowXMLError: If XML is malformed or not a domain element
        """
        root = self._parse_xml(xml_data)
        if root.tag != DOMAIN_TAG:
            raise EscrowXMLError(f"Root element must be 'rdeDomain:domain', got '{root.tag}'")
        return self._parse_domain_element(root, xml_data)

    def parse_deposit(self, xml_data: bytes) -> EscrowDeposit:
        """
        Parse a full escrow deposit.

        Domain records carry the serialized bytes of their own element, with
        comments and whitespace as escrowed.

        Raises:
            EscrowXMLError: If XML is malformed or not a deposit
        """
        root = self._parse_xml(xml_data, self._deposit_parser)
        if root.tag != DEPOSIT_TAG:
            raise EscrowXMLError(f"Root element must be 'rde:deposit', got '{root.tag}'")

        deposit = EscrowDeposit(
            deposit_id=root.get("id"),
            watermark=_parse_datetime(_find_text(root, "rde:watermark"), "watermark"),
        )

        contents = root.find("rde:contents", NSMAP)
        if contents is None:
            raise EscrowXMLError("Missing <rde:contents> element")

        for elem in contents.findall("rdeDomain:domain", NSMAP):
            xml_bytes = etree.tostring(elem, encoding="UTF-8", with_tail=False)
            deposit.domains.append(self._parse_domain_element(elem, xml_bytes))

        for elem in contents.findall("rdeContact:contact", NSMAP):
            deposit.contacts.append(ContactRef(
                contact_id=_require_text(elem, "rdeContact:id"),
                roid=_require_text(elem, "rdeContact:roid"),
            ))

        for elem in contents.findall("rdeHost:host", NSMAP):
            deposit.hosts.append(HostRef(
                host_name=_require_text(elem, "rdeHost:name").lower(),
                roid=_require_text(elem, "rdeHost:roid"),
            ))

        logger.info(
            f"Parsed deposit {deposit.deposit_id}: {len(deposit.domains)} domains, "
            f"{len(deposit.contacts)} contacts, {len(deposit.hosts)} hosts"
        )
        return deposit

    def _parse_domain_element(self, elem: etree._Element, xml_bytes: bytes) -> EscrowDomainRecord:
        name = _require_text(elem, "rdeDomain:name")

        contacts = tuple(
            EscrowContact(type=c.get("type", ""), contact_id=c.text.strip())
            for c in elem.findall("rdeDomain:contact", NSMAP)
            if c.text
        )

        nameservers = ()
        host_attrs = ()
        ns_elem = elem.find("rdeDomain:ns", NSMAP)
        if ns_elem is not None:
            nameservers = tuple(
                h.text.strip() for h in ns_elem.findall("domain:hostObj", NSMAP) if h.text
            )
            host_attrs = tuple(
                self._parse_host_attr(h) for h in ns_elem.findall("domain:hostAttr", NSMAP)
            )

        record = EscrowDomainRecord(
            name=name,
            roid=_require_text(elem, "rdeDomain:roid"),
            sponsor_client_id=_require_text(elem, "rdeDomain:clID"),
            creation_time=_parse_datetime(_find_text(elem, "rdeDomain:crDate"), "crDate"),
            creation_client_id=_find_text(elem, "rdeDomain:crRr"),
            expiration_time=_parse_datetime(_find_text(elem, "rdeDomain:exDate"), "exDate"),
            last_update_time=_parse_datetime(_find_text(elem, "rdeDomain:upDate"), "upDate"),
            last_update_client_id=_find_text(elem, "rdeDomain:upRr"),
            last_transfer_time=_parse_datetime(_find_text(elem, "rdeDomain:trDate"), "trDate"),
            registrant=_find_text(elem, "rdeDomain:registrant"),
            contacts=contacts,
            nameservers=nameservers,
            host_attrs=host_attrs,
            statuses=tuple(s.get("s") for s in elem.findall("rdeDomain:status", NSMAP)),
            auth_info=_find_text(elem, "rdeDomain:authInfo/domain:pw"),
            grace_markers=tuple(
                self._parse_grace_marker(g) for g in elem.findall("rdeDomain:rgpStatus", NSMAP)
            ),
            transfer=self._parse_transfer(elem.find("rdeDomain:trnData", NSMAP)),
            ds_data=tuple(
                self._parse_ds_data(d) for d in elem.iterfind(".//secDNS:dsData", NSMAP)
            ),
            xml_bytes=xml_bytes,
        )

        logger.debug(f"Parsed escrow domain {record.name} ({record.roid})")
        return record

    @staticmethod
    def _parse_host_attr(elem: etree._Element) -> EscrowHostAttr:
        return EscrowHostAttr(
            name=_require_text(elem, "domain:hostName"),
            addresses=tuple(a.text.strip() for a in elem.findall("domain:hostAddr", NSMAP) if a.text),
        )

    @staticmethod
    def _parse_grace_marker(elem: etree._Element) -> EscrowGraceMarker:
        value = elem.get("s")
        try:
            status = RgpStatus(value)
        except ValueError as e:
            raise EscrowXMLError(f"Unknown rgpStatus value: '{value}'") from e
        return EscrowGraceMarker(status=status, client_id=elem.get("clID"))

    @staticmethod
    def _parse_transfer(elem: Optional[etree._Element]) -> Optional[EscrowTransfer]:
        if elem is None:
            return None
        return EscrowTransfer(
            status=_require_text(elem, "rdeDomain:trStatus"),
            requesting_client_id=_require_text(elem, "rdeDomain:reRr"),
            request_date=_parse_datetime(_require_text(elem, "rdeDomain:reDate"), "reDate"),
            acting_client_id=_require_text(elem, "rdeDomain:acRr"),
            action_date=_parse_datetime(_find_text(elem, "rdeDomain:acDate"), "acDate"),
            expiration_date=_parse_datetime(_find_text(elem, "rdeDomain:exDate"), "exDate"),
        )

    @staticmethod
    def _parse_ds_data(elem: etree._Element) -> DelegationSignerData:
        digest = _require_text(elem, "secDNS:digest")
        try:
            return DelegationSignerData(
                key_tag=int(_require_text(elem, "secDNS:keyTag")),
                algorithm=int(_require_text(elem, "secDNS:alg")),
                digest_type=int(_require_text(elem, "secDNS:digestType")),
                digest=bytes.fromhex(digest),
            )
        except ValueError as e:
            raise EscrowXMLError(f"Invalid secDNS dsData: {e}") from e


# Global processor instance
_processor: Optional[EscrowXMLProcessor] = None


def get_xml_processor() -> EscrowXMLProcessor:
    """Get or create global escrow XML processor."""
    global _processor
    if _processor is None:
        _processor = EscrowXMLProcessor()
    return _processor
