"""
Tests for versioned rate writes: version bumps, audit rows, overlap and
continuity checks.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model

from core.models import Destination, RailAgent, ShippingLine

from ..models import CombinedFreight, FreightAuditLog, PortBorderFreight, SeaFreight, WeightSurchargeRule
from ..services.rate_store import (
    RateContinuityWarning,
    RateOverlapWarning,
    RateValidationError,
    create_rate,
    delete_rate,
    diff_snapshots,
    update_rate,
)
from ..services.snapshot import load_rate_snapshot

pytestmark = pytest.mark.django_db

JUNE = {"valid_from": date(2025, 6, 1), "valid_to": date(2025, 6, 30)}
JULY = {"valid_from": date(2025, 7, 1), "valid_to": date(2025, 7, 31)}


@pytest.fixture
def admin_user():
    return get_user_model().objects.create_user(username="rates-admin", password="x", role="admin")


def sea(**overrides):
    data = dict(pol="ICN", pod="QIN", carrier="Harbor Marine", rate=Decimal("500.00"),
                local_charge=Decimal("20.00"), **JUNE)
    data.update(overrides)
    return data


class TestCreate:
    """Test inserting rates"""

    def test_create_starts_at_version_one_and_audits(self, admin_user):
        rate, warning = create_rate(SeaFreight, sea(), user=admin_user)

        assert warning is None
        assert rate.version == 1
        assert rate.created_by == admin_user

        log = FreightAuditLog.objects.get(entity_type="seaFreight", entity_id=str(rate.pk))
        assert log.action == "create"
        assert log.username == "rates-admin"
        assert log.version == 1
        assert log.entity_snapshot["rate"] == "500.00"
        assert log.changes == []

    def test_overlap_blocks_without_force(self, admin_user):
        create_rate(SeaFreight, sea(), user=admin_user)

        with pytest.raises(RateOverlapWarning):
            create_rate(SeaFreight, sea(valid_from=date(2025, 6, 20), valid_to=date(2025, 7, 20)), user=admin_user)

        assert SeaFreight.objects.count() == 1

    def test_overlap_saved_with_force(self, admin_user):
        create_rate(SeaFreight, sea(), user=admin_user)

        rate, warning = create_rate(
            SeaFreight, sea(valid_from=date(2025, 6, 20), valid_to=date(2025, 7, 20)), user=admin_user, force=True
        )

        assert rate.pk is not None
        assert "overlapping" in warning

    def test_other_keys_do_not_overlap(self, admin_user):
        create_rate(SeaFreight, sea(), user=admin_user)

        _, warning = create_rate(SeaFreight, sea(carrier="Blue Line"), user=admin_user)
        _, later = create_rate(SeaFreight, sea(**JULY), user=admin_user)

        assert warning is None
        assert later is None

    def test_gap_after_latest_version_needs_force(self, admin_user):
        create_rate(SeaFreight, sea(), user=admin_user)
        august = {"valid_from": date(2025, 8, 1), "valid_to": date(2025, 8, 31)}

        with pytest.raises(RateContinuityWarning) as excinfo:
            create_rate(SeaFreight, sea(**august), user=admin_user)
        assert "2025-07-01" in str(excinfo.value)
        assert SeaFreight.objects.count() == 1

        rate, warning = create_rate(SeaFreight, sea(**august), user=admin_user, force=True)
        assert rate.pk is not None
        assert "2025-07-01" in warning

    def test_backdated_version_needs_force(self, admin_user):
        create_rate(SeaFreight, sea(**JULY), user=admin_user)

        with pytest.raises(RateContinuityWarning):
            create_rate(SeaFreight, sea(), user=admin_user)

    def test_missing_window_continues_latest_version(self, admin_user):
        create_rate(SeaFreight, sea(), user=admin_user)
        data = sea(rate=Decimal("520.00"))
        del data["valid_from"], data["valid_to"]

        rate, warning = create_rate(SeaFreight, data, user=admin_user)

        assert warning is None
        assert rate.valid_from == date(2025, 7, 1)
        assert rate.valid_to == date(2025, 8, 1)

    def test_missing_end_runs_one_month(self, admin_user):
        rate, _ = create_rate(PortBorderFreight, dict(agent="A", pol="ICN", pod="QIN", rate=Decimal("100"),
                                                      valid_from=date(2025, 1, 31)), user=admin_user)

        assert rate.valid_to == date(2025, 2, 28)

    def test_new_key_window_starts_today(self, admin_user):
        with patch("pricing.services.validity.today", return_value=date(2025, 6, 15)):
            rate, _ = create_rate(PortBorderFreight, dict(agent="A", pol="ICN", pod="QIN", rate=Decimal("100")),
                                  user=admin_user)

        assert (rate.valid_from, rate.valid_to) == (date(2025, 6, 15), date(2025, 7, 15))

    def test_reversed_window_rejected(self, admin_user):
        with pytest.raises(RateValidationError):
            create_rate(SeaFreight, sea(valid_from=date(2025, 6, 30), valid_to=date(2025, 6, 1)), user=admin_user)

    def test_unbounded_weight_sentinel_stored_as_null(self, admin_user):
        rule, _ = create_rate(
            WeightSurchargeRule,
            dict(agent="A", min_weight=Decimal("1000"), max_weight=Decimal("999999"),
                 surcharge=Decimal("40"), **JUNE),
            user=admin_user,
        )

        rule.refresh_from_db()
        assert rule.max_weight is None


class TestUpdate:
    """Test version bumps and audit diffs on update"""

    def test_rate_change_bumps_version(self, admin_user):
        rate, _ = create_rate(SeaFreight, sea(), user=admin_user)

        rate, _ = update_rate(rate, {"rate": Decimal("550.00")}, user=admin_user)

        assert rate.version == 2
        log = FreightAuditLog.objects.filter(action="update").get()
        assert log.version == 2
        assert {"field": "rate", "old_value": "500.00", "new_value": "550.00"} in log.changes
        assert {"field": "version", "old_value": 1, "new_value": 2} in log.changes
        assert all(c["field"] not in ("id", "created_at", "updated_at") for c in log.changes)

    def test_window_change_bumps_version(self, admin_user):
        rate, _ = create_rate(SeaFreight, sea(), user=admin_user)

        rate, _ = update_rate(rate, {"valid_to": date(2025, 7, 15)}, user=admin_user)

        assert rate.version == 2

    def test_cosmetic_change_keeps_version_but_is_audited(self, admin_user):
        rate, _ = create_rate(SeaFreight, sea(), user=admin_user)

        rate, _ = update_rate(rate, {"note": "Weekly sailing", "rate": Decimal("500")}, user=admin_user)

        rate.refresh_from_db()
        assert rate.version == 1
        assert rate.note == "Weekly sailing"
        log = FreightAuditLog.objects.filter(action="update").get()
        assert log.version == 1
        assert log.username == "rates-admin"
        assert log.changes == [{"field": "note", "old_value": None, "new_value": "Weekly sailing"}]

    def test_unchanged_save_writes_no_audit_row(self, admin_user):
        rate, _ = create_rate(SeaFreight, sea(note="Weekly sailing"), user=admin_user)

        update_rate(rate, {"note": "Weekly sailing", "rate": Decimal("500")}, user=admin_user)

        assert not FreightAuditLog.objects.filter(action="update").exists()

    def test_update_does_not_overlap_itself(self, admin_user):
        rate, _ = create_rate(SeaFreight, sea(), user=admin_user)

        _, warning = update_rate(rate, {"valid_to": date(2025, 6, 29)}, user=admin_user)

        assert warning is None

    def test_update_into_sibling_window_needs_force(self, admin_user):
        create_rate(SeaFreight, sea(), user=admin_user)
        july, _ = create_rate(SeaFreight, sea(**JULY), user=admin_user)

        with pytest.raises(RateOverlapWarning):
            update_rate(july, {"valid_from": date(2025, 6, 25)}, user=admin_user)

        july.refresh_from_db()
        assert july.version == 1


class TestDelete:
    """Test deletion audit"""

    def test_delete_records_final_snapshot(self, admin_user):
        rate, _ = create_rate(PortBorderFreight, dict(agent="A", pol="ICN", pod="QIN", rate=Decimal("100"), **JUNE),
                              user=admin_user)
        rate_id = rate.pk

        delete_rate(rate, user=admin_user)

        assert not PortBorderFreight.objects.filter(pk=rate_id).exists()
        log = FreightAuditLog.objects.get(action="delete")
        assert log.entity_type == "portBorderFreight"
        assert log.entity_id == str(rate_id)
        assert log.entity_snapshot["agent"] == "A"


def test_diff_skips_bookkeeping_fields():
    before = {"id": 1, "rate": "1.00", "updated_at": "a"}
    after = {"id": 1, "rate": "2.00", "updated_at": "b"}

    assert diff_snapshots(before, after) == [{"field": "rate", "old_value": "1.00", "new_value": "2.00"}]


def test_snapshot_reads_newest_first(admin_user):
    destination = Destination.objects.create(code="OSH", name="Osh")
    RailAgent.objects.create(name="A", code="AA")
    ShippingLine.objects.create(name="Harbor Marine", code="HM")
    older, _ = create_rate(SeaFreight, sea(), user=admin_user)
    newer, _ = create_rate(SeaFreight, sea(rate=Decimal("480.00")), user=admin_user, force=True)
    create_rate(CombinedFreight, dict(agent="A", pol="ICN", pod="QIN", destination=destination,
                                      rate=Decimal("250"), **JUNE), user=admin_user)

    snapshot = load_rate_snapshot()

    assert [r.id for r in snapshot.sea_freights] == [newer.pk, older.pk]
    assert snapshot.rail_agents[0].code == "AA"
    assert snapshot.shipping_lines[0].name == "Harbor Marine"
    assert snapshot.combined_freights[0].destination_id == str(destination.pk)
