from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..dataclasses import (
    AgentCostBreakdown,
    CalculationPolicy,
    CostCalculationInput,
    CostCalculationResult,
    MissingFreightInfo,
    RateSnapshot,
    ResolvedRate,
)
from . import validity
from .adjustments import lowest_of
from .discovery import discover_agents
from .policy import get_calculation_policy
from .resolver import (
    has_valid,
    resolve_agent_sea_freight,
    resolve_combined_freight,
    resolve_dp_cost,
    resolve_dthc,
    resolve_rail,
    resolve_sea_freight,
    resolve_truck,
    resolve_weight_surcharge,
)
from .utils import ZERO, collation_key, d

logger = logging.getLogger(__name__)


@dataclass
class SeaLeg:
    rate: Decimal = ZERO
    local_charge: Decimal = ZERO
    llocal: Decimal = ZERO
    freight_id: object = None
    carrier: Optional[str] = None
    expired: bool = False
    agent_specific: bool = False


@dataclass
class AgentContext:
    """Everything resolved once per agent and shared by that agent's rows."""
    agent: str
    sea: SeaLeg
    dthc: ResolvedRate
    combined: ResolvedRate
    rail: ResolvedRate
    truck: ResolvedRate
    expired_details: List[str] = field(default_factory=list)


# --------------------- Lookups against registries ---------------------

def _code_for(registry, name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    for entry in registry:
        if entry.name == name:
            return entry.code
    return None


def _find_by_id(records, record_id):
    wanted = str(record_id)
    for record in records:
        if str(record.id) == wanted:
            return record
    return None


# ----------------------------- Sea leg -----------------------------

def resolve_sea_leg(
    snapshot: RateSnapshot,
    payload: CostCalculationInput,
    agent: str,
    calculation_date: str,
) -> SeaLeg:
    """
    Agent-negotiated sea freight first (never when DP is included), then the
    caller-selected general rate, then the route's general rate.
    """
    if not payload.include_dp:
        agent_sea = resolve_agent_sea_freight(snapshot, agent, payload.pol, payload.pod, calculation_date)
        if agent_sea.found:
            rec = agent_sea.record
            return SeaLeg(
                rate=agent_sea.value,
                local_charge=d(rec.local_charge),
                llocal=d(rec.llocal),
                freight_id=None,
                carrier=rec.carrier,
                expired=agent_sea.expired,
                agent_specific=True,
            )

    if payload.selected_sea_freight_id not in (None, ""):
        selected = _find_by_id(snapshot.sea_freights, payload.selected_sea_freight_id)
        if selected is not None:
            return SeaLeg(
                rate=d(selected.rate),
                local_charge=d(selected.local_charge),
                freight_id=selected.id,
                carrier=selected.carrier,
                expired=not validity.is_valid_on_date(selected.valid_from, selected.valid_to, calculation_date),
            )
        logger.warning(
            "Selected sea freight %s not found; falling back to the route's general rate",
            payload.selected_sea_freight_id,
        )

    general = resolve_sea_freight(snapshot, payload.pol, payload.pod, calculation_date)
    if not general.found:
        return SeaLeg()
    rec = general.record
    return SeaLeg(
        rate=general.value,
        local_charge=d(rec.local_charge),
        freight_id=rec.id,
        carrier=rec.carrier,
        expired=general.expired,
    )


# ------------------------------ Rows ------------------------------

def _row(
    payload: CostCalculationInput,
    snapshot: RateSnapshot,
    ctx: AgentContext,
    *,
    agent_label: str,
    truck_agent: str,
    dthc: Decimal,
    combined: Decimal,
    rail: Decimal,
    truck: Decimal,
    surcharge: Decimal,
    dp: Decimal,
    is_combined: bool,
    expired_details: List[str],
) -> AgentCostBreakdown:
    sea = ctx.sea
    total = (
        sea.rate
        + sea.local_charge
        + dthc
        + combined
        + rail
        + truck
        + surcharge
        + dp
        + payload.domestic_transport
        + payload.other_costs_total
        + sea.llocal  # signed, never excludable
    )
    return AgentCostBreakdown(
        agent=agent_label,
        rail_agent=ctx.agent,
        rail_agent_code=_code_for(snapshot.rail_agents, ctx.agent),
        truck_agent=truck_agent,
        truck_agent_code=_code_for(snapshot.truck_agents, truck_agent),
        sea_freight=sea.rate,
        local_charge=sea.local_charge,
        llocal=sea.llocal,
        sea_freight_id=sea.freight_id,
        sea_freight_carrier=sea.carrier,
        sea_freight_carrier_code=_code_for(snapshot.shipping_lines, sea.carrier),
        is_agent_specific_sea_freight=sea.agent_specific,
        dthc=dthc,
        port_border=rail,
        border_destination=truck,
        combined_freight=combined,
        is_combined_freight=is_combined,
        weight_surcharge=surcharge,
        dp=dp,
        domestic_transport=payload.domestic_transport,
        other_costs=list(payload.other_costs),
        total=total,
        has_expired_rates=bool(expired_details),
        expired_rate_details=expired_details,
    )


def build_agent_rows(
    snapshot: RateSnapshot,
    payload: CostCalculationInput,
    agent: str,
    calculation_date: str,
    dp_cost: ResolvedRate,
    partner_truck: ResolvedRate,
    policy: CalculationPolicy,
) -> List[AgentCostBreakdown]:
    """Zero, one, two or three breakdown rows for one candidate agent."""
    sea = resolve_sea_leg(snapshot, payload, agent, calculation_date)
    if payload.local_charge is not None:
        sea.local_charge = d(payload.local_charge)

    ctx = AgentContext(
        agent=agent,
        sea=sea,
        dthc=resolve_dthc(snapshot, agent, payload.pol, payload.pod, sea.carrier, calculation_date),
        combined=resolve_combined_freight(
            snapshot, agent, payload.pol, payload.pod, payload.destination_id, calculation_date
        ),
        rail=resolve_rail(snapshot, agent, payload.pol, payload.pod, calculation_date),
        truck=resolve_truck(snapshot, agent, payload.destination_id, calculation_date),
    )

    # Agent-specific sea rates are DTHC-inclusive.
    dthc_value = ZERO if sea.agent_specific else ctx.dthc.amount()

    if sea.expired:
        ctx.expired_details.append(policy.label("seaFreight"))
    if ctx.dthc.expired:
        ctx.expired_details.append(policy.label("dthc"))

    if sea.agent_specific and not ctx.combined.found and not ctx.rail.found:
        logger.debug("Skipping %s: agent sea freight without any inland rate", agent)
        return []

    rows: List[AgentCostBreakdown] = []

    if ctx.combined.found:
        details = list(ctx.expired_details)
        if ctx.combined.expired:
            details.append(policy.label("combinedFreight"))
        surcharge = resolve_weight_surcharge(snapshot, agent, payload.weight, calculation_date)
        if surcharge.expired:
            details.append(policy.label("weightSurcharge"))
        rows.append(
            _row(
                payload, snapshot, ctx,
                agent_label=agent,
                truck_agent=agent,
                dthc=dthc_value,
                combined=ctx.combined.value,
                rail=ZERO,
                truck=ZERO,
                surcharge=surcharge.amount(),
                dp=ZERO,
                is_combined=True,
                expired_details=details,
            )
        )

    separate_dp = dp_cost.amount() if payload.include_dp else ZERO
    dp_expired = payload.include_dp and dp_cost.expired

    if ctx.rail.found and ctx.truck.found:
        details = list(ctx.expired_details)
        if ctx.rail.expired:
            details.append(policy.label("railFreight"))
        if ctx.truck.expired:
            details.append(policy.label("truckFreight"))
        surcharge = resolve_weight_surcharge(snapshot, agent, payload.weight, calculation_date)
        if surcharge.expired:
            details.append(policy.label("weightSurcharge"))
        if dp_expired:
            details.append(policy.label("dp"))
        rows.append(
            _row(
                payload, snapshot, ctx,
                agent_label=agent,
                truck_agent=agent,
                dthc=dthc_value,
                combined=ZERO,
                rail=ctx.rail.value,
                truck=ctx.truck.value,
                surcharge=surcharge.amount(),
                dp=separate_dp,
                is_combined=False,
                expired_details=details,
            )
        )

    partner = policy.fallback_truck_partner
    if (
        partner
        and partner != agent
        and partner_truck.found
        and partner_truck.value > ZERO
        and ctx.rail.found
    ):
        details = list(ctx.expired_details)
        if ctx.rail.expired:
            details.append(policy.label("railFreight"))
        if partner_truck.expired:
            details.append(policy.label("truckFreight"))
        surcharge = resolve_weight_surcharge(snapshot, partner, payload.weight, calculation_date)
        if surcharge.expired:
            details.append(policy.label("weightSurcharge"))
        if dp_expired:
            details.append(policy.label("dp"))
        rows.append(
            _row(
                payload, snapshot, ctx,
                agent_label=f"{agent} + {partner}",
                truck_agent=partner,
                dthc=dthc_value,
                combined=ZERO,
                rail=ctx.rail.value,
                truck=partner_truck.value,
                surcharge=surcharge.amount(),
                dp=separate_dp,
                is_combined=False,
                expired_details=details,
            )
        )

    return rows


# -------------------------- Missing data --------------------------

def _inland_gaps(
    snapshot: RateSnapshot,
    payload: CostCalculationInput,
    calculation_date: str,
    policy: CalculationPolicy,
) -> List[MissingFreightInfo]:
    pol, pod, dest = payload.pol, payload.pod, payload.destination_id
    has_combined = has_valid(
        snapshot.combined_freights,
        lambda f: f.pol == pol and f.pod == pod and f.destination_id == dest,
        calculation_date,
    )
    if has_combined:
        return []
    has_rail = has_valid(snapshot.port_border_freights, lambda f: f.pol == pol and f.pod == pod, calculation_date)
    has_truck = has_valid(snapshot.border_destination_freights, lambda f: f.destination_id == dest, calculation_date)
    if has_rail and has_truck:
        return []

    gaps = [MissingFreightInfo("combinedFreight", f"{pol} → {pod} → {dest}", policy.message("combinedFreight"))]
    if not has_rail:
        gaps.append(MissingFreightInfo("railFreight", f"{pol} → {pod}", policy.message("railFreight")))
    if not has_truck:
        gaps.append(MissingFreightInfo("truckFreight", f"destination: {dest}", policy.message("truckFreight")))
    return gaps


def _empty_result(payload: CostCalculationInput, missing: List[MissingFreightInfo]) -> CostCalculationResult:
    return CostCalculationResult(
        input=payload,
        breakdown=[],
        lowest_cost_agent="",
        lowest_cost=ZERO,
        is_historical=bool(payload.historical_date),
        historical_date=payload.historical_date,
        missing_freights=missing,
    )


# --------------------------- Entry point ---------------------------

def calculate_cost(
    payload: CostCalculationInput,
    snapshot: RateSnapshot,
    historical_snapshot: Optional[RateSnapshot] = None,
    policy: Optional[CalculationPolicy] = None,
    today: Optional[date] = None,
) -> CostCalculationResult:
    """
    Price every candidate agent for a route and pick the cheapest row.

    ``historical_snapshot`` is accepted for interface compatibility and
    ignored: point-in-time pricing is done by filtering validity windows
    against ``payload.historical_date``.
    """
    policy = policy or get_calculation_policy()
    if historical_snapshot is not None:
        logger.info("Historical snapshot supplied but not supported; using validity-date filtering")

    calculation_date = payload.historical_date or (today or validity.today()).isoformat()
    pol, pod = payload.pol, payload.pod
    route = f"{pol} → {pod}"
    missing: List[MissingFreightInfo] = []

    logger.debug(
        "Calculating cost",
        extra={
            "pol": pol,
            "pod": pod,
            "destination_id": payload.destination_id,
            "calculation_date": calculation_date,
            "include_dp": payload.include_dp,
        },
    )

    same_route = lambda f: f.pol == pol and f.pod == pod  # noqa: E731
    has_general_sea = has_valid(snapshot.sea_freights, same_route, calculation_date)
    has_agent_sea = has_valid(snapshot.agent_sea_freights, same_route, calculation_date)

    if payload.include_dp and not has_general_sea:
        missing.append(MissingFreightInfo("seaFreight", route, policy.message("seaFreightRequiredForDp")))
        return _empty_result(payload, missing)
    if not payload.include_dp and not has_general_sea and not has_agent_sea:
        missing.append(MissingFreightInfo("seaFreight", route, policy.message("seaFreight")))

    agents = discover_agents(snapshot, pol, pod, payload.destination_id, payload.include_dp)

    dp_cost = resolve_dp_cost(snapshot, pol, calculation_date)
    partner = policy.fallback_truck_partner
    partner_truck = (
        resolve_truck(snapshot, partner, payload.destination_id, calculation_date)
        if partner
        else ResolvedRate(value=None)
    )

    breakdown: List[AgentCostBreakdown] = []
    for agent in agents:
        breakdown.extend(
            build_agent_rows(snapshot, payload, agent, calculation_date, dp_cost, partner_truck, policy)
        )

    if not breakdown:
        missing.extend(_inland_gaps(snapshot, payload, calculation_date, policy))
        logger.info(f"No cost rows for {route} → {payload.destination_id}; {len(missing)} missing entries")
        return _empty_result(payload, missing)

    breakdown.sort(key=lambda r: (collation_key(r.rail_agent), collation_key(r.truck_agent)))
    lowest = lowest_of(breakdown, lambda r: r.total)

    logger.debug(f"Lowest cost for {route}: {lowest.agent} = {lowest.total}")
    return CostCalculationResult(
        input=payload,
        breakdown=breakdown,
        lowest_cost_agent=lowest.agent,
        lowest_cost=lowest.total,
        is_historical=bool(payload.historical_date),
        historical_date=payload.historical_date,
        missing_freights=missing,
    )
