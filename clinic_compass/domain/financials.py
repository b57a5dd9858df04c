"""Financial derivation - converts a raw profile into ratios and break-even figures"""

import math

from clinic_compass.domain.models import ClinicProfile, Financials
from clinic_compass.utils.number_utils import safe_ratio_percent


def variable_cost_per_patient(profile: ClinicProfile) -> float:
    """Monthly variable cost spread over monthly patients (0 when there are no patients)"""
    if profile.monthly_patients <= 0:
        return 0.0
    return profile.variable_cost_estimate / profile.monthly_patients


def total_fixed_cost(profile: ClinicProfile) -> int:
    return profile.monthly_rent + profile.labor_cost + profile.other_fixed_cost


def derive_financials(profile: ClinicProfile) -> Financials:
    """
    Derive monthly financial indicators from profile inputs.

    Formulas:
    - monthly_revenue = avg revenue per patient × monthly patients
    - total_cost = rent + labor + other fixed + variable estimate
    - margin / rent / labor ratios are rounded percentages of revenue (0 without revenue)
    - break_even_patients = ceil(fixed cost / contribution margin), where
      contribution margin = avg revenue - variable cost per patient
      (0 when there are no patients or the margin is not positive)

    Example:
        50,000원 × 300명 = 15,000,000원 revenue
        costs 3,000,000 + 5,000,000 + 1,000,000 + 2,000,000 = 11,000,000원
        profit 4,000,000원 → margin 27%, rent ratio 20%
    """
    monthly_revenue = profile.avg_revenue_per_patient * profile.monthly_patients
    fixed_cost = total_fixed_cost(profile)
    total_cost = fixed_cost + profile.variable_cost_estimate
    operating_profit = monthly_revenue - total_cost

    contribution_margin = profile.avg_revenue_per_patient - variable_cost_per_patient(profile)
    # No patient volume means no per-patient variable cost; break-even is reported as 0
    if profile.monthly_patients > 0 and contribution_margin > 0:
        break_even_patients = math.ceil(fixed_cost / contribution_margin)
    else:
        break_even_patients = 0

    return Financials(
        monthly_revenue=monthly_revenue,
        total_fixed_cost=fixed_cost,
        total_cost=total_cost,
        operating_profit=operating_profit,
        operating_margin=safe_ratio_percent(operating_profit, monthly_revenue),
        rent_ratio=safe_ratio_percent(profile.monthly_rent, monthly_revenue),
        labor_ratio=safe_ratio_percent(profile.labor_cost, monthly_revenue),
        break_even_patients=break_even_patients,
    )
