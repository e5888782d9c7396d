from datetime import date
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from ..services.validity import (
    add_months,
    auto_populate_validity_dates,
    check_overlap_warning,
    coerce_date,
    get_validity_status,
    is_valid_on_date,
    periods_overlap,
    validate_validity_period,
    validate_version_continuity,
)


def version(id, valid_from, valid_to, version=1, key="A"):
    return SimpleNamespace(id=id, valid_from=valid_from, valid_to=valid_to, version=version, key=key)


class TestIsValidOnDate:
    """Test inclusive window checks"""

    @pytest.mark.parametrize("on,expected", [
        ("2025-05-31", False),
        ("2025-06-01", True),
        ("2025-06-15", True),
        ("2025-06-30", True),
        ("2025-07-01", False),
    ])
    def test_bounds_are_inclusive(self, on, expected):
        assert is_valid_on_date("2025-06-01", "2025-06-30", on) is expected

    def test_accepts_date_objects(self):
        assert is_valid_on_date(date(2025, 6, 1), date(2025, 6, 30), date(2025, 6, 30))

    def test_missing_bounds_are_open(self):
        assert is_valid_on_date(None, "2025-06-30", "1990-01-01")
        assert is_valid_on_date("2025-06-01", None, "2099-01-01")

    def test_malformed_dates_are_never_valid(self):
        assert not is_valid_on_date("garbage", "2025-06-30", "2025-06-15")
        assert not is_valid_on_date("2025-06-01", "2025-02-30", "2025-06-15")
        assert not is_valid_on_date("2025-06-01", "2025-06-30", "someday")

    def test_defaults_to_today(self):
        with patch("pricing.services.validity.today", return_value=date(2025, 6, 15)):
            assert is_valid_on_date("2025-06-01", "2025-06-30")
            assert not is_valid_on_date("2025-07-01", "2025-07-31")


class TestValidityStatus:
    """Test status classification"""

    ON = "2025-06-15"

    def test_active(self):
        status = get_validity_status("2025-06-01", "2025-12-31", on=self.ON, expiring_days=7)
        assert status.status == "active"
        assert status.days_until_expiry == 199

    def test_expiring(self):
        status = get_validity_status("2025-06-01", "2025-06-20", on=self.ON, expiring_days=7)
        assert status.status == "expiring"
        assert status.days_until_expiry == 5

    def test_expired(self):
        status = get_validity_status("2025-05-01", "2025-05-31", on=self.ON)
        assert status.status == "expired"
        assert status.days_until_expiry == -15

    def test_future(self):
        assert get_validity_status("2025-07-01", "2025-07-31", on=self.ON).status == "future"

    def test_open_ended(self):
        status = get_validity_status("2025-01-01", None, on=self.ON)
        assert status.status == "active"
        assert status.days_until_expiry is None

    def test_malformed_window_is_expired(self):
        assert get_validity_status("not-a-date", "2025-06-30", on=self.ON).status == "expired"


class TestPeriodChecks:
    """Test window validation and overlap detection"""

    def test_validate_period(self):
        assert validate_validity_period("2025-06-01", "2025-06-30") is None
        assert validate_validity_period("2025-06-01", "2025-06-01") is None
        assert validate_validity_period("2025-06-30", "2025-06-01") is not None
        assert validate_validity_period(None, "2025-06-01") is not None
        assert validate_validity_period("06/01/2025", "2025-06-30") is not None

    def test_periods_overlap_touching_days(self):
        assert periods_overlap("2025-06-01", "2025-06-30", "2025-06-30", "2025-07-31")
        assert not periods_overlap("2025-06-01", "2025-06-30", "2025-07-01", "2025-07-31")

    def test_overlap_warning_ignores_self_and_other_keys(self):
        items = [
            version(1, "2025-06-01", "2025-06-30"),
            version(2, "2025-06-01", "2025-06-30", key="B"),
        ]
        same_key = lambda i: i.key == "A"  # noqa: E731

        assert check_overlap_warning("2025-06-10", "2025-07-10", 1, items, same_key) is None
        warning = check_overlap_warning("2025-06-10", "2025-07-10", None, items, same_key)
        assert "2025-06-01 ~ 2025-06-30" in warning

    def test_version_continuity(self):
        items = [version(1, "2025-05-01", "2025-05-31")]
        same_key = lambda i: True  # noqa: E731

        assert validate_version_continuity("2025-06-01", "2025-06-30", None, items, same_key) is None
        assert "2025-06-01" in validate_version_continuity("2025-06-03", "2025-06-30", None, items, same_key)
        assert validate_version_continuity("2025-05-15", "2025-06-30", None, items, same_key) is not None

    def test_auto_populate_continues_latest_version(self):
        items = [version(1, "2025-04-01", "2025-04-30", 1), version(2, "2025-05-01", "2025-05-31", 2)]

        start, end = auto_populate_validity_dates(None, items, lambda i: True)

        assert start == date(2025, 6, 1)
        assert end == date(2025, 7, 1)

    def test_auto_populate_follows_the_version_ending_last(self):
        # an edited older record has a higher version but ends first
        items = [version(1, "2025-04-01", "2025-04-30", 3), version(2, "2025-05-01", "2025-05-31", 1)]

        start, _ = auto_populate_validity_dates(None, items, lambda i: True)

        assert start == date(2025, 6, 1)

    def test_add_months_clamps_day(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2025, 12, 15), 1) == date(2026, 1, 15)

    def test_coerce_date_default(self):
        assert coerce_date("nope", default=date(2025, 1, 1)) == date(2025, 1, 1)
        assert coerce_date("2025-06-15T10:00:00") == date(2025, 6, 15)
