"""
Load the rate tables into an in-memory ``RateSnapshot``.

One snapshot is read per calculation request. Every table is ordered
newest-first so that "first matching record" in the resolver means "most
recently created".
"""
from __future__ import annotations

import logging
from typing import Optional

from core.models import RailAgent, ShippingLine, TruckAgent

from ..dataclasses import (
    AgentRef,
    AgentSeaFreightRate,
    BorderDestinationRate,
    CombinedFreightRate,
    DpCostRate,
    DthcRate,
    PortBorderRate,
    RateSnapshot,
    SeaFreightRate,
    WeightSurchargeRule as WeightSurchargeRuleData,
)
from ..models import (
    AgentSeaFreight,
    BorderDestinationFreight,
    CombinedFreight,
    DpCost,
    Dthc,
    PortBorderFreight,
    SeaFreight,
    WeightSurchargeRule,
)

logger = logging.getLogger(__name__)

NEWEST_FIRST = ('-created_at', '-id')


def _common(obj) -> dict:
    return {
        "id": obj.id,
        "valid_from": obj.valid_from,
        "valid_to": obj.valid_to,
        "version": obj.version,
        "created_at": obj.created_at,
    }


def sea_freight_to_data(obj: SeaFreight) -> SeaFreightRate:
    return SeaFreightRate(
        carrier=obj.carrier,
        pol=obj.pol,
        pod=obj.pod,
        rate=obj.rate,
        local_charge=obj.local_charge,
        note=obj.note,
        freight_code=obj.freight_code,
        **_common(obj),
    )


def load_rate_snapshot() -> RateSnapshot:
    """Read every rate table and registry once."""
    snapshot = RateSnapshot(
        sea_freights=[sea_freight_to_data(o) for o in SeaFreight.objects.order_by(*NEWEST_FIRST)],
        agent_sea_freights=[
            AgentSeaFreightRate(
                agent=o.agent, pol=o.pol, pod=o.pod, rate=o.rate, carrier=o.carrier,
                local_charge=o.local_charge, llocal=o.llocal, note=o.note, **_common(o),
            )
            for o in AgentSeaFreight.objects.order_by(*NEWEST_FIRST)
        ],
        dthc_list=[
            DthcRate(
                agent=o.agent, pol=o.pol, pod=o.pod, carrier=o.carrier, amount=o.amount,
                description=o.description, **_common(o),
            )
            for o in Dthc.objects.order_by(*NEWEST_FIRST)
        ],
        dp_costs=[
            DpCostRate(port=o.port, amount=o.amount, description=o.description, **_common(o))
            for o in DpCost.objects.order_by(*NEWEST_FIRST)
        ],
        combined_freights=[
            CombinedFreightRate(
                agent=o.agent, pol=o.pol, pod=o.pod, destination_id=str(o.destination_id),
                rate=o.rate, description=o.description, **_common(o),
            )
            for o in CombinedFreight.objects.order_by(*NEWEST_FIRST)
        ],
        port_border_freights=[
            PortBorderRate(agent=o.agent, pol=o.pol, pod=o.pod, rate=o.rate, **_common(o))
            for o in PortBorderFreight.objects.order_by(*NEWEST_FIRST)
        ],
        border_destination_freights=[
            BorderDestinationRate(
                agent=o.agent, destination_id=str(o.destination_id), rate=o.rate, **_common(o)
            )
            for o in BorderDestinationFreight.objects.order_by(*NEWEST_FIRST)
        ],
        weight_surcharge_rules=[
            WeightSurchargeRuleData(
                agent=o.agent, min_weight=o.min_weight, max_weight=o.max_weight,
                surcharge=o.surcharge, **_common(o),
            )
            for o in WeightSurchargeRule.objects.order_by(*NEWEST_FIRST)
        ],
        rail_agents=[AgentRef(id=a.id, name=a.name, code=a.code) for a in RailAgent.objects.all()],
        truck_agents=[AgentRef(id=a.id, name=a.name, code=a.code) for a in TruckAgent.objects.all()],
        shipping_lines=[AgentRef(id=a.id, name=a.name, code=a.code) for a in ShippingLine.objects.all()],
    )
    logger.debug(
        "Loaded rate snapshot",
        extra={
            "sea_freights": len(snapshot.sea_freights),
            "rail_agents": len(snapshot.rail_agents),
        },
    )
    return snapshot


def load_historical_snapshot(historical_date: Optional[str] = None) -> Optional[RateSnapshot]:
    """
    Point-in-time snapshots are not stored; callers price historical dates by
    validity filtering on the live tables.
    """
    if historical_date:
        logger.debug(f"No stored snapshot for {historical_date}; using live tables")
    return None
