"""Benchmark comparator - profile metrics against industry averages"""

from typing import Dict

from clinic_compass.domain.financials import derive_financials
from clinic_compass.domain.models import AnalysisSummary, BenchmarkAnalysis, BenchmarkItem, ClinicProfile, Verdict
from clinic_compass.utils.number_utils import round_half_up

# Korean medicine clinic (한의원) industry averages
# - operating margin 28.6%: Statistics Korea economic census 2020
# - rent 10% / labor 25% of revenue: industry practice estimates (no official figure)
# - avg revenue per visit 68,594원, 500 patients/month: HIRA statistics 2023 H1
# - monthly revenue 29,430,000원: Statistics Korea economic census 2020
# - non-insurance share 37.5%: Ministry of Health survey 2014
INDUSTRY_AVERAGES: Dict[str, float] = {
    "operating_margin": 28.6,
    "rent_ratio": 10,
    "labor_ratio": 25,
    "avg_revenue_per_patient": 68_594,
    "monthly_patients": 500,
    "monthly_revenue": 29_430_000,
    "non_insurance_ratio": 37.5,
}

SCORE_CAUTION = 60
SCORE_NOT_RECOMMENDED = 30


def analyze_benchmark(profile: ClinicProfile) -> BenchmarkAnalysis:
    """
    Compare seven metrics against INDUSTRY_AVERAGES.

    overall_score = round(100 × favorable / total); below 60 → caution, below 30 → not_recommended.
    Ties with the average count as favorable.
    """
    fin = derive_financials(profile)
    avg = INDUSTRY_AVERAGES

    items = [
        BenchmarkItem("영업이익률", fin.operating_margin, avg["operating_margin"], "%", True),
        BenchmarkItem("임대료 비율", fin.rent_ratio, avg["rent_ratio"], "%", False),
        BenchmarkItem("인건비 비율", fin.labor_ratio, avg["labor_ratio"], "%", False),
        BenchmarkItem("평균 객단가", profile.avg_revenue_per_patient, avg["avg_revenue_per_patient"], "원", True),
        BenchmarkItem("월 환자 수", profile.monthly_patients, avg["monthly_patients"], "명", True),
        BenchmarkItem("월 매출", fin.monthly_revenue, avg["monthly_revenue"], "원", True),
        BenchmarkItem("비급여 비중", profile.non_insurance_ratio, avg["non_insurance_ratio"], "%", True),
    ]

    favorable_count = sum(1 for item in items if item.is_favorable)
    overall_score = round_half_up(favorable_count / len(items) * 100)

    verdict = Verdict.FIT
    if overall_score < SCORE_CAUTION:
        verdict = verdict.escalate(Verdict.CAUTION)
    if overall_score < SCORE_NOT_RECOMMENDED:
        verdict = verdict.escalate(Verdict.NOT_RECOMMENDED)

    if overall_score >= SCORE_CAUTION:
        actions = ["현재 강점을 유지하면서 약점 지표를 집중 개선", "분기별 벤치마크 재비교로 추세 관리"]
    else:
        actions = ["업계 평균 이하 지표를 우선순위로 개선 계획 수립", "인근 성공 한의원의 운영 모델 벤치마킹"]

    summary = AnalysisSummary(
        verdict=verdict,
        one_liner=f"{len(items)}개 지표 중 {favorable_count}개가 업계 평균 이상입니다 (종합 {overall_score}점).",
        actions=actions,
    )
    return BenchmarkAnalysis(summary=summary, items=items, overall_score=overall_score)
