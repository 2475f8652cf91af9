"""
Tests for grace period reconstruction.
"""

from datetime import datetime, timezone

import pytest

from rde_import.core.grace_periods import (
    GRACE_PERIOD_RULES,
    reconstruct_grace_period,
    reconstruct_grace_periods,
)
from rde_import.exceptions import MissingDataError, UnsupportedFeatureError
from rde_import.models import (
    EscrowDomainRecord,
    EscrowGraceMarker,
    GracePeriodStatus,
    RgpStatus,
)

CREATED = datetime(1999, 4, 3, 22, 0, tzinfo=timezone.utc)
UPDATED = datetime(1999, 12, 3, 9, 0, tzinfo=timezone.utc)


def make_record(*markers, **overrides) -> EscrowDomainRecord:
    fields = dict(
        name="example1.example",
        roid="Dexample1-TEST",
        sponsor_client_id="RegistrarX",
        creation_time=CREATED,
        last_update_time=UPDATED,
        grace_markers=tuple(markers),
    )
    fields.update(overrides)
    return EscrowDomainRecord(**fields)


class TestGracePeriodRules:
    """Tests for the offset table."""

    @pytest.mark.parametrize("status,expected_type,expected_expiration", [
        (RgpStatus.ADD, GracePeriodStatus.ADD, datetime(1999, 4, 8, 22, 0, tzinfo=timezone.utc)),
        (RgpStatus.AUTO_RENEW, GracePeriodStatus.AUTO_RENEW, datetime(2000, 1, 17, 9, 0, tzinfo=timezone.utc)),
        (RgpStatus.REDEMPTION, GracePeriodStatus.REDEMPTION, datetime(2000, 1, 2, 9, 0, tzinfo=timezone.utc)),
        (RgpStatus.RENEW, GracePeriodStatus.RENEW, datetime(1999, 12, 8, 9, 0, tzinfo=timezone.utc)),
        (RgpStatus.TRANSFER, GracePeriodStatus.TRANSFER, datetime(1999, 12, 8, 9, 0, tzinfo=timezone.utc)),
        (RgpStatus.PENDING_DELETE, GracePeriodStatus.PENDING_DELETE, datetime(1999, 12, 8, 9, 0, tzinfo=timezone.utc)),
    ])
    def test_expiration(self, status, expected_type, expected_expiration):
        """Each kind expires at base date plus its offset."""
        period = reconstruct_grace_period(EscrowGraceMarker(status), make_record())

        assert period.type is expected_type
        assert period.expiration_time == expected_expiration
        assert period.client_id == "RegistrarX"

    def test_no_rounding(self):
        """Sub-second base dates are carried exactly."""
        updated = datetime(2014, 10, 9, 8, 25, 43, 305554, tzinfo=timezone.utc)
        period = reconstruct_grace_period(
            EscrowGraceMarker(RgpStatus.TRANSFER), make_record(last_update_time=updated)
        )
        assert period.expiration_time == datetime(2014, 10, 14, 8, 25, 43, 305554, tzinfo=timezone.utc)

    def test_pending_restore_has_no_rule(self):
        """PENDING_RESTORE is the only escrow marker without a rule."""
        assert set(RgpStatus) - set(GRACE_PERIOD_RULES) == {RgpStatus.PENDING_RESTORE}


class TestReconstructGracePeriod:
    """Tests for marker handling."""

    def test_pending_restore_unsupported(self):
        """PENDING_RESTORE is rejected by name."""
        with pytest.raises(UnsupportedFeatureError, match="Unsupported grace period status: PENDING_RESTORE"):
            reconstruct_grace_period(EscrowGraceMarker(RgpStatus.PENDING_RESTORE), make_record())

    def test_marker_client_overrides_sponsor(self):
        """Marker client id wins over the sponsor."""
        period = reconstruct_grace_period(
            EscrowGraceMarker(RgpStatus.RENEW, client_id="RegistrarZ"), make_record()
        )
        assert period.client_id == "RegistrarZ"

    def test_missing_update_date(self):
        """Update-based kinds need an update date."""
        with pytest.raises(MissingDataError, match="last_update_time"):
            reconstruct_grace_period(
                EscrowGraceMarker(RgpStatus.REDEMPTION), make_record(last_update_time=None)
            )

    def test_add_ignores_update_date(self):
        """ADD is based on creation only."""
        period = reconstruct_grace_period(
            EscrowGraceMarker(RgpStatus.ADD), make_record(last_update_time=None)
        )
        assert period.expiration_time == datetime(1999, 4, 8, 22, 0, tzinfo=timezone.utc)


class TestReconstructGracePeriods:
    """Tests for whole-record reconstruction."""

    def test_no_markers(self):
        """Records without markers have no grace periods."""
        assert reconstruct_grace_periods(make_record()) == ()

    def test_keeps_order(self):
        """Periods come out in marker order."""
        periods = reconstruct_grace_periods(make_record(
            EscrowGraceMarker(RgpStatus.RENEW),
            EscrowGraceMarker(RgpStatus.ADD),
        ))
        assert [p.type for p in periods] == [GracePeriodStatus.RENEW, GracePeriodStatus.ADD]

    def test_any_unsupported_marker_fails(self):
        """One PENDING_RESTORE marker fails the whole record."""
        with pytest.raises(UnsupportedFeatureError):
            reconstruct_grace_periods(make_record(
                EscrowGraceMarker(RgpStatus.ADD),
                EscrowGraceMarker(RgpStatus.PENDING_RESTORE),
            ))
