"""
Validity-window reasoning for versioned rate records.

Every rate row carries an inclusive ``[valid_from, valid_to]`` window. The
helpers here answer "is this row usable on date X", classify a window for
display (active / expiring / expired / future), and check new windows against
the other versions of the same natural key before they are saved.
"""
from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Tuple, TypeVar

from django.utils import timezone

from ..dataclasses import DateLike, ValidityStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNPARSEABLE = object()


def today() -> date:
    return timezone.localdate()


def parse_date(value: DateLike):
    """
    Return a ``date`` for a date/datetime/ISO string, ``None`` for a missing
    value, and the ``_UNPARSEABLE`` marker for anything else.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return _UNPARSEABLE
    return _UNPARSEABLE


def coerce_date(value: DateLike, default: Optional[date] = None) -> Optional[date]:
    """Parse a date, returning ``default`` when missing or malformed."""
    parsed = parse_date(value)
    if parsed is None or parsed is _UNPARSEABLE:
        return default
    return parsed


def is_valid_on_date(valid_from: DateLike, valid_to: DateLike, on: DateLike = None) -> bool:
    """
    True iff ``on`` (default: today) falls inside ``[valid_from, valid_to]``.

    A missing bound is open-ended. Malformed dates make the window never valid;
    they are logged, not raised.
    """
    check = parse_date(on) if on is not None else today()
    start = parse_date(valid_from)
    end = parse_date(valid_to)

    if _UNPARSEABLE in (check, start, end):
        logger.warning(
            "Unparseable validity date; treating window as not valid",
            extra={"valid_from": valid_from, "valid_to": valid_to, "on": on},
        )
        return False
    if check is None:
        check = today()
    if start is not None and check < start:
        return False
    if end is not None and check > end:
        return False
    return True


def get_validity_status(
    valid_from: DateLike,
    valid_to: DateLike,
    on: DateLike = None,
    expiring_days: Optional[int] = None,
) -> ValidityStatus:
    """Classify a window relative to ``on`` for list views and warnings."""
    check = coerce_date(on, default=today())
    start = parse_date(valid_from)
    end = parse_date(valid_to)

    if start is _UNPARSEABLE or end is _UNPARSEABLE:
        return ValidityStatus(status="expired")
    if start is not None and start > check:
        return ValidityStatus(status="future", days_until_expiry=(start - check).days)
    if end is None:
        return ValidityStatus(status="active")
    if end < check:
        return ValidityStatus(status="expired", days_until_expiry=(end - check).days)

    remaining = (end - check).days
    if expiring_days is not None and remaining <= expiring_days:
        return ValidityStatus(status="expiring", days_until_expiry=remaining)
    return ValidityStatus(status="active", days_until_expiry=remaining)


# ---------------------- Period validation ----------------------

def validate_validity_period(valid_from: DateLike, valid_to: DateLike) -> Optional[str]:
    """Return an error message for a malformed window, else None."""
    if not valid_from or not valid_to:
        return "Both valid_from and valid_to are required."
    start = parse_date(valid_from)
    end = parse_date(valid_to)
    if start is _UNPARSEABLE or end is _UNPARSEABLE:
        return "Validity dates must be ISO formatted (YYYY-MM-DD)."
    if end < start:
        return "valid_to cannot be earlier than valid_from."
    return None


def periods_overlap(start1: DateLike, end1: DateLike, start2: DateLike, end2: DateLike) -> bool:
    s1, e1 = coerce_date(start1), coerce_date(end1)
    s2, e2 = coerce_date(start2), coerce_date(end2)
    if None in (s1, e1, s2, e2):
        return False
    return s1 <= e2 and s2 <= e1


def check_overlap_warning(
    valid_from: DateLike,
    valid_to: DateLike,
    current_id,
    items: Iterable[T],
    same_key: Callable[[T], bool],
) -> Optional[str]:
    """
    Warn (without blocking) when another version of the same key already
    covers part of the requested window.
    """
    for item in items:
        if not same_key(item) or getattr(item, "id", None) == current_id:
            continue
        if periods_overlap(valid_from, valid_to, item.valid_from, item.valid_to):
            return (
                "A rate for the same key already exists with an overlapping validity "
                f"period ({_fmt(item.valid_from)} ~ {_fmt(item.valid_to)}); "
                f"requested {_fmt(valid_from)} ~ {_fmt(valid_to)}."
            )
    return None


def expected_start_date(
    current_id,
    items: Iterable[T],
    same_key: Callable[[T], bool],
) -> Tuple[Optional[date], Optional[T]]:
    """
    Day after the latest other version's end date, plus that version.

    The latest version is the one ending last; the version counter only breaks
    ties, since it counts edits to a record.
    """
    others = [i for i in items if same_key(i) and getattr(i, "id", None) != current_id]
    if not others:
        return None, None
    latest = max(
        others,
        key=lambda i: (coerce_date(i.valid_to) or date.min, getattr(i, "version", 1) or 1),
    )
    end = coerce_date(latest.valid_to)
    if end is None:
        return None, latest
    return end + timedelta(days=1), latest


def auto_populate_validity_dates(
    current_id,
    items: Iterable[T],
    same_key: Callable[[T], bool],
    on: Optional[date] = None,
) -> Tuple[date, date]:
    """Suggest a window for a new version: continue the latest one for a month."""
    start, _ = expected_start_date(current_id, items, same_key)
    if start is None:
        start = on or today()
    return start, add_months(start, 1)


def validate_version_continuity(
    valid_from: DateLike,
    valid_to: DateLike,
    current_id,
    items: Iterable[T],
    same_key: Callable[[T], bool],
) -> Optional[str]:
    """
    A new version must start the day after the previous version ends and must
    end after it.
    """
    error = validate_validity_period(valid_from, valid_to)
    if error:
        return error

    expected, latest = expected_start_date(current_id, items, same_key)
    if expected is None or latest is None:
        return None

    start, end = coerce_date(valid_from), coerce_date(valid_to)
    prev_start, prev_end = coerce_date(latest.valid_from), coerce_date(latest.valid_to)
    version = getattr(latest, "version", 1) or 1

    if prev_start is not None and start <= prev_start:
        return (
            f"New version must start after v{version} starts "
            f"({_fmt(latest.valid_from)} ~ {_fmt(latest.valid_to)})."
        )
    if prev_end is not None and end <= prev_end:
        return (
            f"New version must end after v{version} ends "
            f"({_fmt(latest.valid_from)} ~ {_fmt(latest.valid_to)})."
        )
    if start != expected:
        return f"New version must start on {expected.isoformat()}, the day after v{version} ends."
    return None


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _fmt(value: DateLike) -> str:
    parsed = coerce_date(value)
    return parsed.isoformat() if parsed else "-"
