from dataclasses import replace
from decimal import Decimal

import pytest

from ..dataclasses import AgentCostBreakdown, CostCalculationResult, OtherCost
from ..services.adjustments import (
    AdjustmentError,
    Exclusions,
    adjusted_total,
    combination_code,
    deduplicate_breakdowns,
    filter_for_display,
    lowest_adjusted,
    rank_result,
    sort_breakdown,
)
from ..services.cost_engine import calculate_cost
from .helpers import TODAY, base_snapshot, combined_rate, make_input, make_policy


def row(agent="A", total="820", combined=False, **overrides):
    values = dict(
        agent=agent,
        rail_agent=agent,
        truck_agent=agent,
        sea_freight=Decimal("500"),
        local_charge=Decimal("20"),
        llocal=Decimal("0"),
        dthc=Decimal("0"),
        port_border=Decimal("0") if combined else Decimal("100"),
        border_destination=Decimal("0") if combined else Decimal("200"),
        combined_freight=Decimal("250") if combined else Decimal("0"),
        is_combined_freight=combined,
        weight_surcharge=Decimal("0"),
        dp=Decimal("0"),
        domestic_transport=Decimal("0"),
        total=Decimal(total),
    )
    values.update(overrides)
    return AgentCostBreakdown(**values)


@pytest.fixture
def result():
    snapshot = base_snapshot(combined_freights=[combined_rate("250")])
    return calculate_cost(make_input(), snapshot, policy=make_policy(), today=TODAY)


class TestExclusions:
    """Test exclusion parsing"""

    def test_from_payload(self):
        exclusions = Exclusions.from_payload({"global": ["dthc"], "rows": {"1": ["sea_freight", "other_0"]}})

        assert exclusions.is_excluded(0, "dthc")
        assert exclusions.is_excluded(1, "other_0")
        assert not exclusions.is_excluded(0, "sea_freight")
        assert exclusions.as_dict() == {"global": ["dthc"], "rows": {"1": ["other_0", "sea_freight"]}}

    @pytest.mark.parametrize("payload", [
        {"global": ["llocal"]},
        {"global": ["total"]},
        {"rows": {"0": ["other_x"]}},
        {"global": [5]},
        {"global": "dthc"},
        {"rows": ["dthc"]},
        {"rows": {"0": "dthc"}},
        {"rows": {"first": ["dthc"]}},
        ["dthc"],
    ])
    def test_rejects_unknown_categories(self, payload):
        with pytest.raises(AdjustmentError):
            Exclusions.from_payload(payload)

    def test_empty_payload(self):
        assert Exclusions.from_payload(None) == Exclusions()


class TestAdjustedTotals:
    """Test totals after exclusions"""

    def test_no_exclusions_matches_component_sum(self):
        assert adjusted_total(row(), 0) == Decimal("820")

    def test_global_and_row_exclusions(self):
        exclusions = Exclusions(global_={"local_charge"}, rows={0: {"border_destination"}})

        assert adjusted_total(row(), 0, exclusions) == Decimal("600")
        assert adjusted_total(row(), 1, exclusions) == Decimal("800")

    def test_other_costs_excluded_by_position(self):
        costs = [OtherCost("Insurance", Decimal("12")), OtherCost("Docs", Decimal("8"))]
        exclusions = Exclusions(rows={0: {"other_1"}})

        assert adjusted_total(row(other_costs=costs), 0, exclusions) == Decimal("832")

    def test_llocal_is_never_excluded(self):
        exclusions = Exclusions(global_={"sea_freight"})

        assert adjusted_total(row(llocal=Decimal("-15")), 0, exclusions) == Decimal("305")

    def test_lowest_adjusted(self):
        rows = [row("A"), row("B", combined=True)]

        assert lowest_adjusted(rows) == (1, Decimal("770"))
        assert lowest_adjusted(rows, Exclusions(rows={0: {"border_destination"}})) == (0, Decimal("620"))
        assert lowest_adjusted([]) == (-1, Decimal("0"))


class TestDisplay:
    """Test tab filtering, codes, dedup and sorting"""

    def test_filter_for_display(self, result):
        assert [r.is_combined_freight for r in filter_for_display(result, include_dp=False)] == [True]
        assert [r.is_combined_freight for r in filter_for_display(result, include_dp=True)] == [False]

    def test_combination_code(self):
        r = row(sea_freight_carrier="Harbor Marine", sea_freight_carrier_code="HM",
                rail_agent_code="AR", truck_agent_code="CW")

        assert combination_code(r, 1) == "HM-ARCW-S002"
        assert combination_code(replace(r, is_combined_freight=True), 0) == "HM-ARCW-C001"

    def test_combination_code_falls_back_to_names(self):
        r = row(agent="steppe", sea_freight_carrier=None)

        assert combination_code(r, 0) == "XX-STST-S001"

    def test_deduplicate_keeps_first(self):
        first = row("A")
        duplicate = replace(row("A"), expired_rate_details=["DTHC"])

        assert deduplicate_breakdowns([first, duplicate, row("B")]) == [first, row("B")]

    def test_sort_by_adjusted_total_desc(self):
        rows = [row("A", combined=True), row("B")]

        ordered = sort_breakdown(rows, "total", "desc")

        assert [r.agent for r in ordered] == ["B", "A"]

    def test_sort_by_agent_name(self):
        rows = [row("beta"), row("Alpha")]

        assert [r.agent for r in sort_breakdown(rows, "agent")] == ["Alpha", "beta"]

    def test_sort_rejects_unknown_key(self):
        with pytest.raises(AdjustmentError):
            sort_breakdown([row()], "price")


class TestRankResult:
    """Test ranking a calculated result"""

    def test_rank_uses_input_tab(self, result):
        ranked = rank_result(result)

        assert [r.row.is_combined_freight for r in ranked.rows] == [True]
        assert ranked.lowest_cost == Decimal("770")
        assert ranked.lowest_agent == "A"
        assert ranked.lowest_code == "HM-AAAA-C001"

    def test_rank_with_exclusions_on_dp_tab(self, result):
        ranked = rank_result(result, Exclusions(global_={"sea_freight"}), include_dp=True)

        assert ranked.lowest_index == 0
        assert ranked.lowest_cost == Decimal("320")

    def test_rank_empty(self):
        empty = CostCalculationResult(input=make_input(), breakdown=[])

        ranked = rank_result(empty)

        assert ranked.rows == []
        assert ranked.lowest_index == -1
        assert ranked.lowest_code == ""
