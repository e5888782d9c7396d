"""
Exclusion-aware ranking of calculated cost rows.

Operators can strike cost components out of a quotation, either for every row
(a global toggle) or for a single row. Adjusted totals, the cheapest adjusted
row, display filtering and combination codes are computed here from a finished
``CostCalculationResult`` without re-running the engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Set, TypeVar

from ..dataclasses import AgentCostBreakdown, CostCalculationResult
from .utils import ZERO, collation_key

T = TypeVar("T")

EXCLUDABLE_COMPONENTS = (
    "sea_freight",
    "local_charge",
    "dthc",
    "port_border",
    "border_destination",
    "combined_freight",
    "weight_surcharge",
    "dp",
    "domestic_transport",
)
SORT_KEYS = ("agent", "rail", "truck", "total")


class AdjustmentError(ValueError):
    """Raised for unknown exclusion categories or sort keys"""
    pass


def _check_category(category: str) -> str:
    if not isinstance(category, str):
        raise AdjustmentError(f"Cost category must be a string, got {category!r}")
    if category in EXCLUDABLE_COMPONENTS:
        return category
    if category.startswith("other_") and category[len("other_"):].isdigit():
        return category
    raise AdjustmentError(f"Unknown cost category: {category}")


def _check_categories(categories, where: str) -> Set[str]:
    if categories is None:
        return set()
    if not isinstance(categories, (list, tuple)):
        raise AdjustmentError(f"{where} must be a list of cost categories")
    return {_check_category(c) for c in categories}


@dataclass
class Exclusions:
    """Excluded categories: ``global_`` applies to every row, ``rows`` by row index."""
    global_: Set[str] = field(default_factory=set)
    rows: Dict[int, Set[str]] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "Exclusions":
        """
        Build from the API shape ``{"global": [...], "rows": {"0": [...]}}``.
        Anything else raises ``AdjustmentError``.
        """
        if not payload:
            return cls()
        if not isinstance(payload, dict):
            raise AdjustmentError("Exclusions must be an object with 'global' and 'rows'")
        global_ = _check_categories(payload.get("global"), "global")
        raw_rows = payload.get("rows") or {}
        if not isinstance(raw_rows, dict):
            raise AdjustmentError("rows must map row indexes to lists of cost categories")
        rows = {}
        for index, categories in raw_rows.items():
            try:
                position = int(index)
            except (TypeError, ValueError):
                raise AdjustmentError(f"Row index must be an integer, got {index!r}")
            rows[position] = _check_categories(categories, f"rows[{index}]")
        return cls(global_=global_, rows=rows)

    def is_excluded(self, index: int, category: str) -> bool:
        return category in self.global_ or category in self.rows.get(index, set())

    def as_dict(self) -> dict:
        return {
            "global": sorted(self.global_),
            "rows": {str(i): sorted(c) for i, c in sorted(self.rows.items())},
        }


def adjusted_total(row: AgentCostBreakdown, index: int, exclusions: Optional[Exclusions] = None) -> Decimal:
    """Row total with excluded components removed. ``llocal`` always stays in."""
    exclusions = exclusions or Exclusions()
    total = ZERO
    for category in EXCLUDABLE_COMPONENTS:
        if not exclusions.is_excluded(index, category):
            total += getattr(row, category) or ZERO
    for n, other in enumerate(row.other_costs):
        if not exclusions.is_excluded(index, f"other_{n}"):
            total += other.amount
    return total + (row.llocal or ZERO)


def lowest_of(rows: List[T], total: Callable[[T], Decimal]) -> Optional[T]:
    """First row with the minimum total; ties keep the earlier row."""
    lowest = None
    lowest_total = None
    for row in rows:
        value = total(row)
        if lowest is None or value < lowest_total:
            lowest, lowest_total = row, value
    return lowest


def lowest_adjusted(rows: List[AgentCostBreakdown], exclusions: Optional[Exclusions] = None):
    """(index, adjusted total) of the cheapest row, or ``(-1, 0)`` when empty."""
    if not rows:
        return -1, ZERO
    indexed = list(enumerate(rows))
    index, _ = lowest_of(indexed, lambda pair: adjusted_total(pair[1], pair[0], exclusions))
    return index, adjusted_total(rows[index], index, exclusions)


def filter_for_display(result: CostCalculationResult, include_dp: bool) -> List[AgentCostBreakdown]:
    """Combined-freight rows on the DP-excluded tab, separate rows on the DP tab."""
    if include_dp:
        return [row for row in result.breakdown if not row.is_combined_freight]
    return [row for row in result.breakdown if row.is_combined_freight]


def _code(code: Optional[str], name: Optional[str], default: str = "") -> str:
    if code:
        return code
    if name:
        return name[:2].upper()
    return default


def combination_code(row: AgentCostBreakdown, index: int) -> str:
    """Quotation code such as ``HM-ABCD-S002`` for the row at ``index``."""
    carrier = _code(row.sea_freight_carrier_code, row.sea_freight_carrier, default="XX")
    rail = _code(row.rail_agent_code, row.rail_agent)
    truck = _code(row.truck_agent_code, row.truck_agent)
    kind = "C" if row.is_combined_freight else "S"
    return f"{carrier}-{rail}{truck}-{kind}{index + 1:03d}"


def _dedup_key(row: AgentCostBreakdown) -> tuple:
    return (
        row.agent,
        row.rail_agent,
        row.truck_agent,
        row.sea_freight_carrier or "",
        row.is_combined_freight,
        row.sea_freight,
        row.local_charge or ZERO,
        row.dthc,
        row.port_border,
        row.border_destination,
        row.combined_freight,
        row.weight_surcharge,
        row.dp,
        row.domestic_transport,
    )


def deduplicate_breakdowns(rows: Iterable[AgentCostBreakdown]) -> List[AgentCostBreakdown]:
    """Drop rows identical in every priced component, keeping the first."""
    seen = set()
    unique = []
    for row in rows:
        key = _dedup_key(row)
        if key not in seen:
            seen.add(key)
            unique.append(row)
    return unique


def sort_breakdown(
    rows: List[AgentCostBreakdown],
    key: str = "total",
    direction: str = "asc",
    exclusions: Optional[Exclusions] = None,
) -> List[AgentCostBreakdown]:
    """Stable sort for display; ``total`` sorts by adjusted total."""
    if key not in SORT_KEYS:
        raise AdjustmentError(f"Unknown sort key: {key}")
    if direction not in ("asc", "desc"):
        raise AdjustmentError(f"Unknown sort direction: {direction}")

    # Adjusted totals depend on the original row index.
    indexed = list(enumerate(rows))
    if key == "agent":
        sort_key = lambda pair: collation_key(pair[1].agent)  # noqa: E731
    elif key == "rail":
        sort_key = lambda pair: collation_key(pair[1].rail_agent)  # noqa: E731
    elif key == "truck":
        sort_key = lambda pair: collation_key(pair[1].truck_agent)  # noqa: E731
    else:
        sort_key = lambda pair: adjusted_total(pair[1], pair[0], exclusions)  # noqa: E731

    indexed.sort(key=sort_key, reverse=(direction == "desc"))
    return [row for _, row in indexed]


@dataclass
class RankedRow:
    index: int
    row: AgentCostBreakdown
    adjusted_total: Decimal
    code: str


@dataclass
class RankedResult:
    rows: List[RankedRow]
    lowest_index: int
    lowest_agent: str
    lowest_cost: Decimal
    lowest_code: str


def rank_result(
    result: CostCalculationResult,
    exclusions: Optional[Exclusions] = None,
    include_dp: Optional[bool] = None,
) -> RankedResult:
    """
    Display rows for one tab with adjusted totals and codes, plus the cheapest
    row after exclusions. ``include_dp`` defaults to the calculation input's.
    """
    if include_dp is None:
        include_dp = result.input.include_dp
    rows = deduplicate_breakdowns(filter_for_display(result, include_dp))
    ranked = [
        RankedRow(index=i, row=row, adjusted_total=adjusted_total(row, i, exclusions), code=combination_code(row, i))
        for i, row in enumerate(rows)
    ]
    index, cost = lowest_adjusted(rows, exclusions)
    if index < 0:
        return RankedResult(rows=[], lowest_index=-1, lowest_agent="", lowest_cost=ZERO, lowest_code="")
    return RankedResult(
        rows=ranked,
        lowest_index=index,
        lowest_agent=rows[index].agent,
        lowest_cost=cost,
        lowest_code=ranked[index].code,
    )
