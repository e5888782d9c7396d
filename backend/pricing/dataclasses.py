from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from .services.utils import ZERO

# Validity bounds arrive as date objects from the ORM and as ISO strings from
# API payloads and fixtures; the validity evaluator accepts both.
DateLike = Union[date, str, None]


# --------------------------- Rate records ---------------------------

@dataclass
class SeaFreightRate:
    id: Any
    carrier: str
    pol: str
    pod: str
    rate: Decimal
    local_charge: Decimal = ZERO
    valid_from: DateLike = None
    valid_to: DateLike = None
    version: int = 1
    note: Optional[str] = None
    freight_code: Optional[str] = None
    created_at: Any = None


@dataclass
class AgentSeaFreightRate:
    id: Any
    agent: str
    pol: str
    pod: str
    rate: Decimal
    carrier: Optional[str] = None
    local_charge: Decimal = ZERO
    llocal: Decimal = ZERO  # signed: negative values are discounts
    valid_from: DateLike = None
    valid_to: DateLike = None
    version: int = 1
    note: Optional[str] = None
    created_at: Any = None


@dataclass
class DthcRate:
    id: Any
    agent: str
    pol: str
    pod: str
    carrier: str
    amount: Decimal
    valid_from: DateLike = None
    valid_to: DateLike = None
    version: int = 1
    description: Optional[str] = None
    created_at: Any = None


@dataclass
class DpCostRate:
    id: Any
    port: str
    amount: Decimal
    valid_from: DateLike = None
    valid_to: DateLike = None
    version: int = 1
    description: Optional[str] = None
    created_at: Any = None


@dataclass
class CombinedFreightRate:
    id: Any
    agent: str
    pol: str
    pod: str
    destination_id: str
    rate: Decimal
    valid_from: DateLike = None
    valid_to: DateLike = None
    version: int = 1
    description: Optional[str] = None
    created_at: Any = None


@dataclass
class PortBorderRate:
    """Rail leg: port of discharge to the border crossing."""
    id: Any
    agent: str
    pol: str
    pod: str
    rate: Decimal
    valid_from: DateLike = None
    valid_to: DateLike = None
    version: int = 1
    created_at: Any = None


@dataclass
class BorderDestinationRate:
    """Truck leg: border crossing to the final destination."""
    id: Any
    agent: str
    destination_id: str
    rate: Decimal
    valid_from: DateLike = None
    valid_to: DateLike = None
    version: int = 1
    created_at: Any = None


@dataclass
class WeightSurchargeRule:
    id: Any
    agent: str
    min_weight: Decimal
    max_weight: Optional[Decimal]  # None = no upper bound
    surcharge: Decimal
    valid_from: DateLike = None
    valid_to: DateLike = None
    version: int = 1
    created_at: Any = None

    def covers(self, weight: Decimal) -> bool:
        if weight < self.min_weight:
            return False
        return self.max_weight is None or weight <= self.max_weight


@dataclass
class AgentRef:
    """Registry entry for a rail agent, truck agent or shipping line."""
    id: Any
    name: str
    code: Optional[str] = None


@dataclass
class RateSnapshot:
    """
    All rate tables and registries a calculation reads from.

    Built once per request by ``pricing.services.snapshot.load_rate_snapshot``
    and treated as immutable for the duration of one ``calculate_cost`` call.
    """
    sea_freights: List[SeaFreightRate] = field(default_factory=list)
    agent_sea_freights: List[AgentSeaFreightRate] = field(default_factory=list)
    dthc_list: List[DthcRate] = field(default_factory=list)
    dp_costs: List[DpCostRate] = field(default_factory=list)
    combined_freights: List[CombinedFreightRate] = field(default_factory=list)
    port_border_freights: List[PortBorderRate] = field(default_factory=list)
    border_destination_freights: List[BorderDestinationRate] = field(default_factory=list)
    weight_surcharge_rules: List[WeightSurchargeRule] = field(default_factory=list)
    rail_agents: List[AgentRef] = field(default_factory=list)
    truck_agents: List[AgentRef] = field(default_factory=list)
    shipping_lines: List[AgentRef] = field(default_factory=list)


# ------------------------ Calculation types -------------------------

@dataclass
class OtherCost:
    category: str
    amount: Decimal


@dataclass
class CostCalculationInput:
    pol: str
    pod: str
    destination_id: str
    weight: Decimal
    include_dp: bool = False
    domestic_transport: Decimal = ZERO
    local_charge: Optional[Decimal] = None  # overrides the sea leg's local charge when set
    other_costs: List[OtherCost] = field(default_factory=list)
    selected_sea_freight_id: Any = None
    historical_date: Optional[str] = None

    @property
    def other_costs_total(self) -> Decimal:
        return sum((c.amount for c in self.other_costs), ZERO)


@dataclass
class ResolvedRate:
    """Outcome of a single lookup: absent (value None), valid, or expired fallback."""
    value: Optional[Decimal]
    expired: bool = False
    record: Any = None

    @property
    def found(self) -> bool:
        return self.value is not None

    def amount(self) -> Decimal:
        return self.value if self.value is not None else ZERO


@dataclass
class MissingFreightInfo:
    type: str
    route: str
    message: str


@dataclass
class AgentCostBreakdown:
    agent: str
    rail_agent: str
    truck_agent: str
    sea_freight: Decimal
    local_charge: Decimal
    llocal: Decimal
    dthc: Decimal
    port_border: Decimal
    border_destination: Decimal
    combined_freight: Decimal
    is_combined_freight: bool
    weight_surcharge: Decimal
    dp: Decimal
    domestic_transport: Decimal
    total: Decimal
    other_costs: List[OtherCost] = field(default_factory=list)
    is_agent_specific_sea_freight: bool = False
    sea_freight_id: Any = None
    sea_freight_carrier: Optional[str] = None
    sea_freight_carrier_code: Optional[str] = None
    rail_agent_code: Optional[str] = None
    truck_agent_code: Optional[str] = None
    has_expired_rates: bool = False
    expired_rate_details: List[str] = field(default_factory=list)


@dataclass
class CostCalculationResult:
    input: CostCalculationInput
    breakdown: List[AgentCostBreakdown]
    lowest_cost_agent: str = ""
    lowest_cost: Decimal = ZERO
    is_historical: bool = False
    historical_date: Optional[str] = None
    missing_freights: List[MissingFreightInfo] = field(default_factory=list)


@dataclass
class ValidityStatus:
    status: str  # active | expiring | expired | future
    days_until_expiry: Optional[int] = None


@dataclass
class CalculationPolicy:
    """Business policy knobs read from ``pricing/config/calculation_policy.json``."""
    fallback_truck_partner: Optional[str] = None
    expiring_soon_days: int = 7
    expired_labels: Dict[str, str] = field(default_factory=dict)
    missing_messages: Dict[str, str] = field(default_factory=dict)

    def label(self, component: str) -> str:
        return self.expired_labels.get(component, component)

    def message(self, kind: str) -> str:
        return self.missing_messages.get(kind, kind)
