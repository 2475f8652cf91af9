"""
Tests for escrow XML processor module.
"""

from datetime import datetime, timezone

import pytest

from rde_import.exceptions import EscrowXMLError
from rde_import.models import EscrowContact, RgpStatus


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestParseDomain:
    """Tests for single domain fragment parsing."""

    def test_parse_basic_fields(self, parse):
        """Parse the base domain fragment."""
        record = parse("domain_fragment.xml")

        assert record.name == "example1.example"
        assert record.roid == "Dexample1-TEST"
        assert record.sponsor_client_id == "RegistrarX"
        assert record.creation_client_id == "RegistrarX"
        assert record.creation_time == utc(1999, 4, 3, 22, 0)
        assert record.expiration_time == utc(2015, 4, 3, 22, 0)
        assert record.last_update_time is None
        assert record.last_update_client_id is None
        assert record.registrant == "jd1234"
        assert record.statuses == ("ok",)
        assert record.auth_info == "0123456789abcdef"

    def test_parse_contacts(self, parse):
        """Contacts keep their declared type."""
        record = parse("domain_fragment.xml")

        assert record.contacts == (
            EscrowContact(type="admin", contact_id="sh8013"),
            EscrowContact(type="tech", contact_id="sh8013"),
        )

    def test_xml_bytes_kept_exactly(self, processor, testdata):
        """The record carries the input bytes unmodified."""
        data = testdata("domain_fragment.xml")
        record = processor.parse_domain(data)
        assert record.xml_bytes == data

    def test_parse_host_objs(self, parse):
        """Nameservers declared by object."""
        record = parse("domain_fragment_host_objs.xml")
        assert record.nameservers == ("ns1.example.net", "ns2.example.net")
        assert record.host_attrs == ()

    def test_parse_host_attrs(self, parse):
        """Nameservers declared inline."""
        record = parse("domain_fragment_host_attrs.xml")
        assert record.nameservers == ()
        assert len(record.host_attrs) == 1
        assert record.host_attrs[0].name == "ns1.example1.example"
        assert record.host_attrs[0].addresses == ("192.0.2.2",)

    def test_parse_secdns(self, parse):
        """DS data is parsed with a binary digest."""
        record = parse("domain_fragment_secdns.xml")

        assert len(record.ds_data) == 1
        ds = record.ds_data[0]
        assert ds.key_tag == 4609
        assert ds.algorithm == 8
        assert ds.digest_type == 2
        assert ds.digest.hex().upper() == (
            "5FA1FA1C2F70AA483FE178B765D82B272072B4E4167902C5B7F97D46C8899F44"
        )

    def test_parse_transfer(self, parse):
        """Transfer data with microsecond timestamps."""
        record = parse("domain_fragment_transfer_period.xml")

        assert record.transfer.status == "clientApproved"
        assert record.transfer.requesting_client_id == "RegistrarX"
        assert record.transfer.acting_client_id == "RegistrarY"
        assert record.transfer.request_date == utc(2014, 10, 8, 16, 23, 21, 897803)
        assert record.transfer.action_date == utc(2014, 10, 9, 8, 25, 43, 305554)
        assert record.transfer.expiration_date is None
        assert record.last_transfer_time == utc(2014, 10, 9, 8, 25, 43, 305554)

    def test_parse_grace_marker(self, processor, fragment_with):
        """rgpStatus markers with and without a client id."""
        record = processor.parse_domain(fragment_with(
            '<rdeDomain:rgpStatus s="addPeriod"/>',
            '<rdeDomain:rgpStatus s="renewPeriod" clID="RegistrarZ"/>',
        ))

        assert [m.status for m in record.grace_markers] == [RgpStatus.ADD, RgpStatus.RENEW]
        assert record.grace_markers[0].client_id is None
        assert record.grace_markers[1].client_id == "RegistrarZ"

    def test_unknown_grace_marker(self, processor, fragment_with):
        """Unknown rgpStatus values are rejected."""
        with pytest.raises(EscrowXMLError, match="gracefulPeriod"):
            processor.parse_domain(fragment_with('<rdeDomain:rgpStatus s="gracefulPeriod"/>'))

    def test_missing_auth_info(self, parse):
        """Fragment without authInfo."""
        record = parse("domain_fragment_registrant_missing.xml")
        assert record.auth_info is None
        assert record.registrant is None


class TestParseErrors:
    """Tests for malformed input."""

    def test_invalid_xml(self, processor):
        """Malformed XML raises EscrowXMLError."""
        with pytest.raises(EscrowXMLError, match="Invalid XML"):
            processor.parse_domain(b"<rdeDomain:domain")

    def test_wrong_root(self, processor):
        """Non-domain root raises EscrowXMLError."""
        with pytest.raises(EscrowXMLError, match="rdeDomain:domain"):
            processor.parse_domain(b'<foo xmlns="urn:example"/>')

    def test_missing_roid(self, processor, testdata):
        """A domain without roid is rejected."""
        data = testdata("domain_fragment.xml").replace(
            b"<rdeDomain:roid>Dexample1-TEST</rdeDomain:roid>", b""
        )
        with pytest.raises(EscrowXMLError, match="rdeDomain:roid"):
            processor.parse_domain(data)

    def test_invalid_timestamp(self, processor, testdata):
        """Unparseable dates are rejected."""
        data = testdata("domain_fragment.xml").replace(
            b"1999-04-03T22:00:00.0Z", b"yesterday"
        )
        with pytest.raises(EscrowXMLError, match="crDate"):
            processor.parse_domain(data)

    def test_entities_not_expanded(self, processor):
        """External entities are not resolved."""
        data = b"""<?xml version="1.0"?>
<!DOCTYPE d [<!ENTITY xxe SYSTEM "file:///etc/passwd">]>
<rdeDomain:domain xmlns:rdeDomain="urn:ietf:params:xml:ns:rdeDomain-1.0">
  <rdeDomain:name>&xxe;</rdeDomain:name>
  <rdeDomain:roid>Dx-TEST</rdeDomain:roid>
  <rdeDomain:clID>RegistrarX</rdeDomain:clID>
</rdeDomain:domain>"""
        with pytest.raises(EscrowXMLError):
            processor.parse_domain(data)


class TestParseDeposit:
    """Tests for full deposit parsing."""

    def test_parse_deposit(self, processor, testdata):
        """Deposit header, domains, contacts and hosts."""
        deposit = processor.parse_deposit(testdata("deposit.xml"))

        assert deposit.deposit_id == "20150404001"
        assert deposit.watermark == utc(2015, 4, 4)
        assert [d.name for d in deposit.domains] == ["example1.example", "example2.example"]
        assert {c.contact_id: c.roid for c in deposit.contacts} == {
            "jd1234": "Cjd1234-TEST",
            "sh8013": "Csh8013-TEST",
        }
        assert [h.host_name for h in deposit.hosts] == ["ns1.example.net"]

    def test_domain_bytes_reparse(self, processor, testdata):
        """Each deposit domain's bytes re-parse to the same name and roid."""
        deposit = processor.parse_deposit(testdata("deposit.xml"))

        for record in deposit.domains:
            reparsed = processor.parse_domain(record.xml_bytes)
            assert reparsed.name == record.name
            assert reparsed.roid == record.roid

    def test_domain_bytes_keep_comments_and_whitespace(self, processor):
        """Comments and indentation inside an escrowed domain reach xml_bytes."""
        deposit = processor.parse_deposit(
            b'<rde:deposit type="FULL" id="1"'
            b' xmlns:rde="urn:ietf:params:xml:ns:rde-1.0"'
            b' xmlns:rdeDomain="urn:ietf:params:xml:ns:rdeDomain-1.0">\n'
            b"<rde:contents>\n"
            b"<rdeDomain:domain>\n"
            b"  <!-- escrow agent note -->\n"
            b"  <rdeDomain:name>Example1.EXAMPLE</rdeDomain:name>\n"
            b"  <rdeDomain:roid>Dexample1-TEST</rdeDomain:roid>\n"
            b"  <rdeDomain:clID>RegistrarX</rdeDomain:clID>\n"
            b"</rdeDomain:domain>\n"
            b"</rde:contents>\n"
            b"</rde:deposit>"
        )

        (record,) = deposit.domains
        assert b"<!-- escrow agent note -->" in record.xml_bytes
        assert b"\n  <rdeDomain:name>Example1.EXAMPLE</rdeDomain:name>\n" in record.xml_bytes
        assert record.xml_bytes.endswith(b"</rdeDomain:domain>")
        assert record.roid == "Dexample1-TEST"

    def test_domain_fragment_is_not_deposit(self, processor, testdata):
        """parse_deposit rejects a bare domain."""
        with pytest.raises(EscrowXMLError, match="rde:deposit"):
            processor.parse_deposit(testdata("domain_fragment.xml"))
