from __future__ import annotations

import unicodedata
from decimal import Decimal
from typing import Optional

ZERO = Decimal("0")


def d(val) -> Decimal:
    """Coerce incoming values to Decimal safely."""
    if isinstance(val, Decimal):
        return val
    if val is None or val == "":
        return ZERO
    return Decimal(str(val))


def d_or_none(val) -> Optional[Decimal]:
    """Like d(), but keeps None so "no value" stays distinguishable from zero."""
    if val is None:
        return None
    return d(val)


def collation_key(value: Optional[str]) -> tuple:
    """
    Sort key for agent names.

    NFC-normalized, case-folded text sorts Hangul syllables in dictionary order
    and Latin names case-insensitively. Accented Latin letters sort by code
    point, after the unaccented alphabet. The raw string breaks ties so the
    ordering stays total.
    """
    text = unicodedata.normalize("NFC", value or "")
    return (text.casefold(), text)
