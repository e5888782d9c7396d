from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Iterable, Optional, TypeVar

from ..dataclasses import DateLike, ResolvedRate
from .utils import d_or_none
from .validity import is_valid_on_date

logger = logging.getLogger(__name__)

T = TypeVar("T")


def resolve(
    records: Iterable[T],
    key: Callable[[T], bool],
    as_of: DateLike,
    value: Callable[[T], Optional[Decimal]] = lambda r: r.rate,
) -> ResolvedRate:
    """
    Pick the record for one natural key on ``as_of``.

    No match returns ``value=None`` (never 0). Otherwise the first match valid
    on ``as_of`` wins; failing that, the first match overall is returned with
    ``expired=True``. Record order is the repository's (newest first).
    """
    matches = [r for r in records if key(r)]
    if not matches:
        return ResolvedRate(value=None, expired=False)

    for record in matches:
        if is_valid_on_date(record.valid_from, record.valid_to, as_of):
            return ResolvedRate(value=d_or_none(value(record)), expired=False, record=record)

    fallback = matches[0]
    logger.debug(
        "No rate valid on %s; using expired fallback",
        as_of,
        extra={"record_id": getattr(fallback, "id", None), "candidates": len(matches)},
    )
    return ResolvedRate(value=d_or_none(value(fallback)), expired=True, record=fallback)


def has_valid(records: Iterable[T], key: Callable[[T], bool], as_of: DateLike) -> bool:
    """True when at least one record for the key is valid on ``as_of``."""
    return any(key(r) and is_valid_on_date(r.valid_from, r.valid_to, as_of) for r in records)


# ------------------ Per-table lookups ------------------

def resolve_sea_freight(snapshot, pol: str, pod: str, as_of: DateLike) -> ResolvedRate:
    return resolve(snapshot.sea_freights, lambda f: f.pol == pol and f.pod == pod, as_of)


def resolve_agent_sea_freight(snapshot, agent: str, pol: str, pod: str, as_of: DateLike) -> ResolvedRate:
    return resolve(
        snapshot.agent_sea_freights,
        lambda f: f.agent == agent and f.pol == pol and f.pod == pod,
        as_of,
    )


def resolve_dthc(snapshot, agent: str, pol: str, pod: str, carrier: Optional[str], as_of: DateLike) -> ResolvedRate:
    if not carrier:
        return ResolvedRate(value=None, expired=False)
    return resolve(
        snapshot.dthc_list,
        lambda x: x.agent == agent and x.pol == pol and x.pod == pod and x.carrier == carrier,
        as_of,
        value=lambda x: x.amount,
    )


def resolve_dp_cost(snapshot, port: str, as_of: DateLike) -> ResolvedRate:
    return resolve(snapshot.dp_costs, lambda x: x.port == port, as_of, value=lambda x: x.amount)


def resolve_combined_freight(snapshot, agent: str, pol: str, pod: str, destination_id: str, as_of: DateLike) -> ResolvedRate:
    return resolve(
        snapshot.combined_freights,
        lambda f: f.agent == agent and f.pol == pol and f.pod == pod and f.destination_id == destination_id,
        as_of,
    )


def resolve_rail(snapshot, agent: str, pol: str, pod: str, as_of: DateLike) -> ResolvedRate:
    return resolve(
        snapshot.port_border_freights,
        lambda f: f.agent == agent and f.pol == pol and f.pod == pod,
        as_of,
    )


def resolve_truck(snapshot, agent: str, destination_id: str, as_of: DateLike) -> ResolvedRate:
    return resolve(
        snapshot.border_destination_freights,
        lambda f: f.agent == agent and f.destination_id == destination_id,
        as_of,
    )


def resolve_weight_surcharge(snapshot, agent: str, weight: Decimal, as_of: DateLike) -> ResolvedRate:
    return resolve(
        snapshot.weight_surcharge_rules,
        lambda r: r.agent == agent and r.covers(weight),
        as_of,
        value=lambda r: r.surcharge,
    )
