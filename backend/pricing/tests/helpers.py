from datetime import date
from decimal import Decimal

from ..dataclasses import (
    AgentRef,
    BorderDestinationRate,
    CalculationPolicy,
    CombinedFreightRate,
    CostCalculationInput,
    DpCostRate,
    PortBorderRate,
    RateSnapshot,
    SeaFreightRate,
)

TODAY = date(2025, 6, 15)
WINDOW = {"valid_from": "2025-06-01", "valid_to": "2025-06-30"}
EXPIRED = {"valid_from": "2025-05-01", "valid_to": "2025-05-31"}


def make_policy(partner="COWIN"):
    return CalculationPolicy(
        fallback_truck_partner=partner,
        expiring_soon_days=7,
        expired_labels={
            "seaFreight": "Sea freight",
            "dthc": "DTHC",
            "combinedFreight": "Combined freight",
            "railFreight": "Rail freight",
            "truckFreight": "Truck freight",
            "weightSurcharge": "Weight surcharge",
            "dp": "DP",
        },
        missing_messages={
            "seaFreightRequiredForDp": "DP needs a general sea freight rate.",
            "seaFreight": "No sea freight.",
            "combinedFreight": "No combined freight.",
            "railFreight": "No rail freight.",
            "truckFreight": "No truck freight.",
        },
    )


def make_input(**overrides):
    values = dict(pol="ICN", pod="QIN", destination_id="OSH", weight=Decimal("1000"))
    values.update(overrides)
    return CostCalculationInput(**values)


def base_snapshot(**extra):
    """Rail 100 + truck 200 for agent A, general sea 500/20, DP 50 at ICN."""
    snapshot = RateSnapshot(
        sea_freights=[
            SeaFreightRate(id=1, carrier="Harbor Marine", pol="ICN", pod="QIN",
                           rate=Decimal("500"), local_charge=Decimal("20"), **WINDOW),
        ],
        dp_costs=[DpCostRate(id=1, port="ICN", amount=Decimal("50"), **WINDOW)],
        port_border_freights=[
            PortBorderRate(id=1, agent="A", pol="ICN", pod="QIN", rate=Decimal("100"), **WINDOW),
        ],
        border_destination_freights=[
            BorderDestinationRate(id=1, agent="A", destination_id="OSH", rate=Decimal("200"), **WINDOW),
        ],
        rail_agents=[AgentRef(id=1, name="A", code="AA")],
        truck_agents=[AgentRef(id=1, name="A", code="AA")],
        shipping_lines=[AgentRef(id=1, name="Harbor Marine", code="HM")],
    )
    for name, value in extra.items():
        setattr(snapshot, name, value)
    return snapshot


def combined_rate(rate="250", **window):
    return CombinedFreightRate(
        id=1, agent="A", pol="ICN", pod="QIN", destination_id="OSH",
        rate=Decimal(rate), **(window or WINDOW),
    )
