"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from rde_import.core.xml_processor import EscrowXMLProcessor
from rde_import.database.memory import MemoryStore

TESTDATA = Path(__file__).parent / "testdata"

# Contacts and hosts the fixture domains refer to
CONTACTS = {
    "jd1234": "Cjd1234-TEST",
    "sh8013": "Csh8013-TEST",
}
HOSTS = {
    "ns1.example.net": "Hns1_example_net-TEST",
    "ns2.example.net": "Hns2_example_net-TEST",
}

def load_testdata(name: str) -> bytes:
    """Read a file from tests/testdata."""
    return (TESTDATA / name).read_bytes()


@pytest.fixture
def testdata():
    """Loader for test data files."""
    return load_testdata


@pytest.fixture
def fragment_with():
    """
    Build a domain fragment from domain_fragment.xml plus extra elements.

    Usage: fragment_with('<rdeDomain:rgpStatus s="addPeriod"/>')
    """
    def build(*elements: str, base: str = "domain_fragment.xml") -> bytes:
        xml = load_testdata(base).decode("utf-8")
        extra = "".join(elements)
        return xml.replace("</rdeDomain:domain>", f"{extra}</rdeDomain:domain>").encode("utf-8")
    return build


@pytest.fixture
def processor():
    """Escrow XML processor."""
    return EscrowXMLProcessor()


@pytest.fixture
def parse(processor, testdata):
    """Parse a testdata fragment into an escrow record."""
    def parse_file(name: str):
        return processor.parse_domain(testdata(name))
    return parse_file


@pytest.fixture
def store():
    """Memory store holding the fixture contacts and hosts."""
    memory = MemoryStore()
    for contact_id, roid in CONTACTS.items():
        memory.add_contact(contact_id, roid)
    for host_name, roid in HOSTS.items():
        memory.add_host(host_name, roid)
    return memory


@pytest.fixture
def empty_store():
    """Memory store with no contacts or hosts."""
    return MemoryStore()
