"""Opening simulator - month-by-month projection with break-even and ROI detection"""

from typing import List, Optional, Tuple

from clinic_compass.domain.financials import total_fixed_cost, variable_cost_per_patient
from clinic_compass.domain.models import (
    AnalysisSummary,
    ClinicProfile,
    MonthlyProjection,
    SimulatorAnalysis,
    SimulatorScenario,
    Verdict,
)
from clinic_compass.utils.number_utils import round_half_up

HORIZON_MONTHS = 36

# (label, monthly patient growth %)
SCENARIOS: List[Tuple[str, float]] = [
    ("보수적", 1),
    ("기본", 3),
    ("낙관적", 5),
]
BASE_SCENARIO_INDEX = 1

# Base scenario recovering the investment later than this is flagged
ROI_CAUTION_MONTH = 30
# Cumulative loss at horizon end worse than this share of the investment is severe
SEVERE_DEFICIT_SHARE = 0.5


def simulate_scenario(
    profile: ClinicProfile,
    label: str,
    growth_rate: float,
    months: int = HORIZON_MONTHS,
) -> SimulatorScenario:
    """
    Project patients, revenue, cost and profit with compounding monthly growth.

    - patients(m) = round(monthly_patients × (1 + growth/100)^m)
    - cost(m) = fixed cost + round(patients(m) × variable cost per patient)
    - cumulative starts at -initial_investment
    break_even_month / roi_month record the first month profit / cumulative
    profit is non-negative and stay None if never reached.
    """
    fixed_cost = total_fixed_cost(profile)
    variable_per_patient = variable_cost_per_patient(profile)

    projections: List[MonthlyProjection] = []
    cumulative = -profile.initial_investment
    break_even_month: Optional[int] = None
    roi_month: Optional[int] = None

    for month in range(1, months + 1):
        patients = round_half_up(profile.monthly_patients * (1 + growth_rate / 100) ** month)
        revenue = patients * profile.avg_revenue_per_patient
        cost = fixed_cost + round_half_up(patients * variable_per_patient)
        profit = revenue - cost
        cumulative += profit

        projections.append(
            MonthlyProjection(
                month=month,
                patients=patients,
                revenue=revenue,
                cost=cost,
                profit=profit,
                cumulative_profit=cumulative,
            )
        )

        if break_even_month is None and profit >= 0:
            break_even_month = month
        if roi_month is None and cumulative >= 0:
            roi_month = month

    return SimulatorScenario(
        label=label,
        growth_rate=growth_rate,
        projections=projections,
        break_even_month=break_even_month,
        roi_month=roi_month,
    )


def classify_base_scenario(base: SimulatorScenario, initial_investment: int) -> Verdict:
    """
    Verdict from the base scenario. Rules apply in order and only escalate:
    1. no ROI within horizon, or ROI after month 30 → caution
    2. never breaks even → not_recommended
    3. no ROI and final cumulative loss worse than half the investment → not_recommended
    """
    verdict = Verdict.FIT
    if base.roi_month is None or base.roi_month > ROI_CAUTION_MONTH:
        verdict = verdict.escalate(Verdict.CAUTION)
    if base.break_even_month is None:
        verdict = verdict.escalate(Verdict.NOT_RECOMMENDED)
    final_cumulative = base.projections[-1].cumulative_profit if base.projections else 0
    if base.roi_month is None and final_cumulative < -initial_investment * SEVERE_DEFICIT_SHARE:
        verdict = verdict.escalate(Verdict.NOT_RECOMMENDED)
    return verdict


def analyze_simulator(profile: ClinicProfile) -> SimulatorAnalysis:
    """Run the conservative / base / optimistic scenarios and judge the base case"""
    initial_investment = profile.initial_investment
    scenarios = [simulate_scenario(profile, label, rate) for label, rate in SCENARIOS]
    base = scenarios[BASE_SCENARIO_INDEX]
    verdict = classify_base_scenario(base, initial_investment)

    if base.roi_month is not None:
        one_liner = (
            f"기본 시나리오(월 {base.growth_rate:g}% 성장) 기준, "
            f"{base.roi_month}개월 차에 투자금 회수가 예상됩니다."
        )
    else:
        one_liner = f"{HORIZON_MONTHS}개월 내 투자금 회수가 어려울 수 있습니다. 비용 구조 재검토가 필요합니다."

    summary = AnalysisSummary(
        verdict=verdict,
        one_liner=one_liner,
        actions=[
            "초기 투자금을 최소화할 수 있는 방안 검토 (중고 장비, 단계적 인테리어)",
            "개원 초기 환자 유입을 위한 지역 홍보 전략 수립",
            "월별 실적 대비 시나리오 달성률 추적",
        ],
    )
    return SimulatorAnalysis(summary=summary, initial_investment=initial_investment, scenarios=scenarios)
