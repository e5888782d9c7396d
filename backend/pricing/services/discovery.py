from __future__ import annotations

import logging
from typing import Iterable, List

from ..dataclasses import RateSnapshot

logger = logging.getLogger(__name__)


def _unique(names: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for name in names:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def discover_agents(
    snapshot: RateSnapshot,
    pol: str,
    pod: str,
    destination_id: str,
    include_dp: bool,
) -> List[str]:
    """
    Candidate agents for a route, in first-seen order.

    Rail (port-border) and combined-freight rows always contribute. Agent sea
    freight contributes only when DP is excluded: DP-inclusive quotes must be
    priced from a general carrier sea rate. Names missing from the rail agent
    registry are dropped.
    """
    from_rail = [f.agent for f in snapshot.port_border_freights if f.pol == pol and f.pod == pod]
    from_combined = [
        f.agent
        for f in snapshot.combined_freights
        if f.pol == pol and f.pod == pod and f.destination_id == destination_id
    ]
    from_agent_sea = [] if include_dp else [
        f.agent for f in snapshot.agent_sea_freights if f.pol == pol and f.pod == pod
    ]

    registry = {a.name for a in snapshot.rail_agents}
    candidates = _unique(from_rail + from_combined + from_agent_sea)
    known = [name for name in candidates if name in registry]

    dropped = [name for name in candidates if name not in registry]
    if dropped:
        logger.debug("Dropping agents missing from the registry: %s", dropped)
    return known
