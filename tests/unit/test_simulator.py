"""Unit tests for the opening simulator"""

from clinic_compass.domain.models import MonthlyProjection, SimulatorScenario, Verdict
from clinic_compass.domain.simulator import (
    HORIZON_MONTHS,
    analyze_simulator,
    classify_base_scenario,
    simulate_scenario,
)


def _investment(amount):
    """Overrides putting the whole initial investment into the deposit"""
    return dict(
        deposit_amount=amount,
        key_money=0,
        interior_cost=0,
        equipment_cost=0,
        initial_stock_cost=0,
        other_initial_cost=0,
    )


def _scenario(roi_month, break_even_month, final_cumulative):
    projection = MonthlyProjection(
        month=HORIZON_MONTHS, patients=0, revenue=0, cost=0, profit=0, cumulative_profit=final_cumulative
    )
    return SimulatorScenario(
        label="기본",
        growth_rate=3,
        projections=[projection],
        break_even_month=break_even_month,
        roi_month=roi_month,
    )


def test_first_month_of_base_scenario(base_profile):
    """300 × 1.03 = 309 patients; cost 9,000,000 + 2,060,000"""
    scenario = simulate_scenario(base_profile, "기본", 3)
    first = scenario.projections[0]

    assert first.month == 1
    assert first.patients == 309
    assert first.revenue == 15_450_000
    assert first.cost == 11_060_000
    assert first.profit == 4_390_000
    assert first.cumulative_profit == -85_610_000


def test_projection_covers_horizon_and_accumulates(base_profile):
    scenario = simulate_scenario(base_profile, "기본", 3)

    assert len(scenario.projections) == HORIZON_MONTHS
    assert [p.month for p in scenario.projections] == list(range(1, HORIZON_MONTHS + 1))
    cumulative = -base_profile.initial_investment
    for p in scenario.projections:
        assert p.profit == p.revenue - p.cost
        cumulative += p.profit
        assert p.cumulative_profit == cumulative


def test_break_even_and_roi_months(base_profile):
    scenario = simulate_scenario(base_profile, "기본", 3)

    assert scenario.break_even_month == 1
    assert scenario.roi_month == 13
    assert scenario.projections[11].cumulative_profit < 0
    assert scenario.projections[12].cumulative_profit >= 0


def test_zero_investment_recovers_in_first_profitable_month(make_profile):
    scenario = simulate_scenario(make_profile(**_investment(0)), "기본", 3)
    assert scenario.roi_month == 1


def test_faster_growth_never_delays_roi(base_profile):
    result = analyze_simulator(base_profile)
    conservative, base, optimistic = result.scenarios

    assert [s.label for s in result.scenarios] == ["보수적", "기본", "낙관적"]
    assert [s.growth_rate for s in result.scenarios] == [1, 3, 5]
    assert optimistic.roi_month <= base.roi_month <= conservative.roi_month


def test_reference_clinic_is_fit(base_profile):
    result = analyze_simulator(base_profile)

    assert result.initial_investment == 90_000_000
    assert result.summary.verdict == Verdict.FIT
    assert result.summary.one_liner == "기본 시나리오(월 3% 성장) 기준, 13개월 차에 투자금 회수가 예상됩니다."


def test_unrecovered_investment_is_caution(make_profile):
    """1,000,000,000원 ends near -477,000,000원: unrecovered but not below half the investment"""
    result = analyze_simulator(make_profile(**_investment(1_000_000_000)))
    base = result.scenarios[1]

    assert base.roi_month is None
    assert base.projections[-1].cumulative_profit > -500_000_000
    assert result.summary.verdict == Verdict.CAUTION
    assert result.summary.one_liner.startswith("36개월 내 투자금 회수가 어려울 수 있습니다")


def test_deep_deficit_is_not_recommended(make_profile):
    result = analyze_simulator(make_profile(**_investment(2_000_000_000)))

    assert result.scenarios[1].roi_month is None
    assert result.summary.verdict == Verdict.NOT_RECOMMENDED


def test_never_breaking_even_is_not_recommended(make_profile):
    """20,000원 × 150명 never covers 9,000,000원 fixed cost within the horizon"""
    result = analyze_simulator(make_profile(avg_revenue_per_patient=20_000, monthly_patients=150))

    assert all(s.break_even_month is None for s in result.scenarios)
    assert result.summary.verdict == Verdict.NOT_RECOMMENDED


def test_classify_late_roi_is_caution():
    assert classify_base_scenario(_scenario(31, 1, 100), 90_000_000) == Verdict.CAUTION
    assert classify_base_scenario(_scenario(30, 1, 100), 90_000_000) == Verdict.FIT


def test_classify_rules_only_escalate():
    """Shallow deficit with break-even stays caution; missing break-even always escalates"""
    assert classify_base_scenario(_scenario(None, 5, -10), 100) == Verdict.CAUTION
    assert classify_base_scenario(_scenario(None, 5, -60), 100) == Verdict.NOT_RECOMMENDED
    assert classify_base_scenario(_scenario(None, None, -10), 100) == Verdict.NOT_RECOMMENDED


def test_cumulative_non_decreasing_once_profitable(base_profile):
    for _, rate in [("보수적", 1), ("기본", 3), ("낙관적", 5)]:
        scenario = simulate_scenario(base_profile, "시나리오", rate)
        start = scenario.break_even_month - 1
        cumulative = [p.cumulative_profit for p in scenario.projections[start:]]
        assert cumulative == sorted(cumulative)


def test_break_even_and_roi_are_first_qualifying_months(make_profile):
    """Low starting volume reaches break-even partway through the horizon"""
    scenario = simulate_scenario(make_profile(monthly_patients=180, variable_cost_estimate=1_200_000), "기본", 3)
    profits = [p.profit for p in scenario.projections]
    cumulative = [p.cumulative_profit for p in scenario.projections]

    assert scenario.break_even_month == next(i + 1 for i, v in enumerate(profits) if v >= 0)
    assert scenario.break_even_month > 1
    if scenario.roi_month is not None:
        assert scenario.roi_month == next(i + 1 for i, v in enumerate(cumulative) if v >= 0)
