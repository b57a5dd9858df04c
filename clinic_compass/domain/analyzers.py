"""Rule-based analyzers - threshold checks that classify a clinic profile into verdicts"""

from typing import Dict, List

from clinic_compass.domain.financials import derive_financials
from clinic_compass.domain.models import (
    AnalysisSummary,
    BuildingType,
    ClinicProfile,
    ComplaintFrequency,
    CooAnalysis,
    LocationAnalysis,
    OpeningStatus,
    PackageAnalysis,
    PackageItem,
    PatientGroup,
    PositioningAnalysis,
    RevisitRange,
    RiskAnalysis,
    RiskItem,
    Specialty,
    Verdict,
)
from clinic_compass.utils.number_utils import format_number, format_won, round_half_up

# Rent ratio thresholds (% of revenue)
LOCATION_RENT_CAUTION = 20
LOCATION_RENT_NOT_RECOMMENDED = 35
COO_RENT_LIMIT = 15
COO_LABOR_LIMIT = 35

# Operating margin thresholds (%); clinic industry average is 25-35%
MARGIN_NOT_RECOMMENDED = 10
MARGIN_CAUTION = 25

# Representative midpoint for each revisit bucket
REVISIT_MIDPOINTS: Dict[RevisitRange, int] = {
    RevisitRange.UNDER_30: 15,
    RevisitRange.FROM_30_TO_50: 40,
    RevisitRange.FROM_50_TO_70: 60,
    RevisitRange.OVER_70: 80,
}
LOW_REVISIT_MIDPOINT = 40

STUDENT_HIGH_PRICE = 80_000
NON_INSURANCE_PACKAGE_PIVOT = 50

# Risk thresholds
CONCENTRATION_NOT_RECOMMENDED = 60
CONCENTRATION_CAUTION = 40
WORKING_DAYS_PER_MONTH = 25
PATIENTS_PER_STAFF_HOUR_LIMIT = 2
NON_INSURANCE_DEPENDENCY_LIMIT = 70


def analyze_location(profile: ClinicProfile) -> LocationAnalysis:
    """
    Location fitness from building type, patient group, opening stage and rent burden.

    Verdict rules (escalate only):
    - pre-opening → caution
    - rent ratio > 20% → caution, > 35% → not_recommended (strict comparisons)
    """
    issues: List[str] = []
    strengths: List[str] = []
    verdict = Verdict.FIT

    if profile.building_type == BuildingType.MEDICAL:
        strengths.append("메디컬빌딩은 의료 수요가 집중되는 환경으로, 초기 환자 유입에 유리합니다.")
    elif profile.building_type == BuildingType.RETAIL:
        strengths.append("일반 상가는 유동 인구 접근성이 높을 수 있으나, 의료 이미지 구축에 별도 노력이 필요합니다.")

    if profile.opening_status == OpeningStatus.PRE_OPENING:
        issues.append("개원 전 단계입니다. 상권 분석과 경쟁 의원 조사를 반드시 수행하십시오.")
        verdict = verdict.escalate(Verdict.CAUTION)

    if profile.patient_group == PatientGroup.ELDERLY and profile.building_type == BuildingType.RETAIL:
        strengths.append("노년층 대상 진료는 1층 상가의 접근성이 유리합니다.")
    if profile.patient_group == PatientGroup.OFFICE_WORKERS:
        issues.append("직장인 대상이면 역세권·오피스 밀집 지역 여부를 확인하십시오.")

    fin = derive_financials(profile)
    if fin.rent_ratio > LOCATION_RENT_CAUTION:
        issues.append(
            f"임대료 비중이 매출의 {fin.rent_ratio}% (추정치)로 높습니다. 일반적으로 15% 이하가 안정적입니다."
        )
        verdict = verdict.escalate(Verdict.CAUTION)
    if fin.rent_ratio > LOCATION_RENT_NOT_RECOMMENDED:
        verdict = verdict.escalate(Verdict.NOT_RECOMMENDED)

    if not issues:
        strengths.append("현재 입력된 조건상 입지 관련 주요 리스크가 발견되지 않았습니다.")

    if verdict == Verdict.FIT:
        one_liner = (
            f"{profile.region_city} {profile.region_dong} 지역, "
            f"{profile.building_type.value} 기준으로 입지 조건이 양호합니다."
        )
        actions = ["인근 경쟁 한의원 현황 파악", "건물 내 타 의료기관과의 시너지 분석"]
    else:
        if verdict == Verdict.CAUTION:
            one_liner = "입지 조건에 보완이 필요한 항목이 있습니다. 아래 세부 내용을 확인하십시오."
        else:
            one_liner = "현재 임대료 수준 대비 매출 추정치가 매우 불리합니다. 입지 재검토를 권장합니다."
        actions = ["임대료 협상 또는 대안 부지 검토", "목표 환자군의 실제 유동 인구 데이터 확인"]

    return LocationAnalysis(
        summary=AnalysisSummary(verdict=verdict, one_liner=one_liner, actions=actions),
        strengths=strengths,
        issues=issues,
    )


def analyze_coo_finance(profile: ClinicProfile) -> CooAnalysis:
    """
    Operations and finance review (COO/CFO view).

    Verdict rules (escalate only):
    - operating margin < 10% → not_recommended, < 25% → caution
    - monthly patients below break-even → at least caution
    Rent (> 15%), labor (> 35%), excluded owner salary and low revisit rate
    are reported as issues without changing the verdict.
    """
    fin = derive_financials(profile)
    issues: List[str] = []
    insights: List[str] = []
    verdict = Verdict.FIT

    if fin.operating_margin < MARGIN_NOT_RECOMMENDED:
        issues.append(
            f"영업이익률이 {fin.operating_margin}% (추정치)로 매우 낮습니다. 비용 구조 개선이 시급합니다."
        )
        verdict = verdict.escalate(Verdict.NOT_RECOMMENDED)
    elif fin.operating_margin < MARGIN_CAUTION:
        issues.append(
            f"영업이익률이 {fin.operating_margin}% (추정치)입니다. "
            "한의원 평균(25–35%)보다 낮으므로 개선 여지를 검토하십시오."
        )
        verdict = verdict.escalate(Verdict.CAUTION)
    else:
        insights.append(f"영업이익률 {fin.operating_margin}% (추정치)로 안정적입니다.")

    if fin.rent_ratio > COO_RENT_LIMIT:
        issues.append(f"임대료가 매출의 {fin.rent_ratio}% (추정치)를 차지합니다. 15% 이하가 권장됩니다.")
    else:
        insights.append(f"임대료 비중 {fin.rent_ratio}% (추정치)로 적정 수준입니다.")

    if fin.labor_ratio > COO_LABOR_LIMIT:
        issues.append(
            f"인건비 비율이 매출의 {fin.labor_ratio}% (추정치)로 높습니다. "
            "직원 생산성 또는 인력 구조를 점검하십시오."
        )
    else:
        insights.append(f"인건비 비율 {fin.labor_ratio}% (추정치)로 적정 범위입니다.")

    insights.append(
        f"손익분기 환자 수: 월 {format_won(fin.break_even_patients)}명 (추정치). "
        f"현재 월 내원 환자 {format_won(profile.monthly_patients)}명 (입력값)."
    )

    if fin.break_even_patients > profile.monthly_patients:
        issues.append("현재 환자 수가 손익분기점에 미달합니다. 환자 유입 확대 또는 비용 절감이 필요합니다.")
        verdict = verdict.escalate(Verdict.CAUTION)

    if not profile.includes_owner_salary:
        issues.append("원장 인건비가 비용에 포함되지 않았습니다. 실질 수익은 위 추정치보다 낮을 수 있습니다.")

    if REVISIT_MIDPOINTS[profile.revisit_range] < LOW_REVISIT_MIDPOINT:
        issues.append(
            f"재진율이 {profile.revisit_range.value} (입력값)로 낮습니다. 신규 환자 유치 비용이 지속적으로 발생합니다."
        )

    if verdict == Verdict.FIT:
        one_liner = (
            f"월 매출 {format_won(fin.monthly_revenue)}원 (추정치), "
            f"영업이익률 {fin.operating_margin}%로 재무 구조가 안정적입니다."
        )
        actions = ["비급여 진료 비중 확대를 통한 객단가 향상 검토", "재진율 유지·개선 프로그램 운영"]
    else:
        if verdict == Verdict.CAUTION:
            one_liner = "재무 지표에 개선이 필요한 항목이 있습니다. 비용 구조를 점검하십시오."
        else:
            one_liner = "수익성이 매우 낮습니다. 비용 절감 또는 매출 증대 방안을 즉시 마련하십시오."
        actions = ["고정비(임대료·인건비) 구조 재점검", "객단가 향상 또는 환자 수 확대 전략 수립"]

    return CooAnalysis(
        summary=AnalysisSummary(verdict=verdict, one_liner=one_liner, actions=actions),
        insights=insights,
        issues=issues,
        financials=fin,
    )


def _package_price(avg_revenue: int, sessions: int, discount: float, unit: str) -> str:
    price = round_half_up(avg_revenue * sessions * discount)
    return f"{format_won(price)}원 ({unit}, 추정치)"


def _package_for(specialty: Specialty, avg_revenue: int) -> PackageItem:
    if specialty == Specialty.MUSCULOSKELETAL:
        return PackageItem(
            name="통증 집중 관리 패키지",
            description="침, 부항, 추나 요법을 결합한 근골격 통증 관리 프로그램",
            target_price=_package_price(avg_revenue, 5, 0.9, "5회"),
            sessions="주 2회, 총 5회",
            rationale="단회 방문 대비 5회 패키지로 재진율을 높이고 치료 연속성을 확보합니다.",
        )
    if specialty == Specialty.TRAFFIC_ACCIDENT:
        return PackageItem(
            name="교통사고 후유증 케어",
            description="사고 후 통증·자율신경 불균형에 대한 체계적 회복 프로그램",
            target_price="보험 급여 범위 내 (입력값 기준 별도 산정)",
            sessions="주 3회 이상, 의료진 판단에 따라 조정",
            rationale="교통사고 환자는 보험 처리로 인해 객단가보다 방문 빈도와 치료 기간이 핵심입니다.",
        )
    if specialty == Specialty.AUTONOMIC:
        return PackageItem(
            name="스트레스·불면 관리 프로그램",
            description="침, 약침, 한약 처방을 결합한 자율신경 균형 회복 과정",
            target_price=_package_price(avg_revenue, 8, 0.85, "8회"),
            sessions="주 1–2회, 총 8회 (4주 과정)",
            rationale="정신신체 영역은 장기 관리가 필요하므로 8회 과정으로 환자 이탈을 줄입니다.",
        )
    if specialty == Specialty.HERBAL_MEDICINE:
        return PackageItem(
            name="체질 개선 탕약 프로그램",
            description="체질 진단 후 맞춤 탕약 처방 및 경과 관찰",
            target_price=_package_price(avg_revenue, 3, 1.0, "탕약 3제"),
            sessions="초진 + 2주 간격 경과 관찰 3회",
            rationale="탕약 처방은 객단가가 높아 소수 환자로도 매출 기여도가 큽니다. 경과 관찰로 재진을 유도합니다.",
        )
    # Specialty.DIET_AESTHETICS
    return PackageItem(
        name="한방 체형 관리 코스",
        description="매선, 약침, 한약을 활용한 체형 관리 프로그램",
        target_price=_package_price(avg_revenue, 10, 0.8, "10회"),
        sessions="주 2회, 총 10회 (5주 과정)",
        rationale="미용 시술은 비급여 비중이 높아 수익성이 좋으나, 패키지 할인으로 이탈 방지가 중요합니다.",
    )


def _fallback_package(avg_revenue: int) -> PackageItem:
    return PackageItem(
        name="종합 건강 관리 패키지",
        description="침, 뜸, 부항 등 기본 한방 치료를 결합한 건강 관리 프로그램",
        target_price=_package_price(avg_revenue, 5, 0.9, "5회"),
        sessions="주 1–2회, 총 5회",
        rationale="기본 진료 패키지로 재진율 향상과 환자 고정화를 목표로 합니다.",
    )


def analyze_package(profile: ClinicProfile) -> PackageAnalysis:
    """
    Design one treatment package per specialty offered.

    Packages are emitted in canonical specialty order regardless of input order.
    Verdict is fit with two or more packages, caution otherwise.
    """
    packages = [
        _package_for(specialty, profile.avg_revenue_per_patient)
        for specialty in Specialty
        if specialty in profile.specialties
    ]
    if not packages:
        packages.append(_fallback_package(profile.avg_revenue_per_patient))

    if profile.non_insurance_ratio > NON_INSURANCE_PACKAGE_PIVOT:
        note = (
            "비급여 비중이 높아 패키지 가격 설정의 자유도가 큽니다. "
            "단, 가격 민감도를 고려한 단계별 설계를 권장합니다."
        )
    else:
        note = "비급여 비중이 낮으므로, 비급여 항목을 패키지에 포함하여 점진적으로 비중을 높이는 전략이 유효합니다."

    summary = AnalysisSummary(
        verdict=Verdict.FIT if len(packages) >= 2 else Verdict.CAUTION,
        one_liner=f"주 진료 분야 기준으로 {len(packages)}개의 패키지 구성안을 도출했습니다.",
        actions=["각 패키지의 원가 및 시간 소요를 검증한 후 시범 운영", "환자 반응에 따라 가격 및 회차를 조정"],
    )
    return PackageAnalysis(summary=summary, packages=packages, non_insurance_note=note)


def analyze_positioning(profile: ClinicProfile) -> PositioningAnalysis:
    """Specialty breadth and patient-group fit"""
    issues: List[str] = []
    strengths: List[str] = []
    verdict = Verdict.FIT
    specialties = profile.specialties
    count = len(specialties)

    if count == 1:
        strengths.append(
            f"'{specialties[0].value}' 단일 전문 분야에 집중하고 있습니다. 브랜딩과 환자 인식에 유리합니다."
        )
    elif count <= 3:
        strengths.append(
            f"{count}개 분야를 운영 중입니다. 적정 수준이나, 대외 홍보 시 주력 분야 1개를 명확히 하십시오."
        )
    else:
        issues.append(
            f"{count}개 분야를 동시에 운영하고 있습니다. 전문성 인식이 희석될 수 있으므로, "
            "핵심 분야 2개 이내로 포지셔닝을 좁히는 것을 권장합니다."
        )
        verdict = verdict.escalate(Verdict.CAUTION)

    group = profile.patient_group
    if group == PatientGroup.ELDERLY and Specialty.DIET_AESTHETICS in specialties:
        issues.append(
            "주요 환자군이 노년층이나 다이어트·미용 분야를 운영 중입니다. 타겟과 서비스의 정합성을 확인하십시오."
        )
    if group == PatientGroup.STUDENTS and Specialty.HERBAL_MEDICINE in specialties:
        issues.append(
            "학생 대상 내과·탕약은 가격 저항이 높을 수 있습니다. 보험 급여 위주 진료 또는 간편 처방 구성을 고려하십시오."
        )
    if group == PatientGroup.OFFICE_WORKERS and Specialty.MUSCULOSKELETAL in specialties:
        strengths.append("직장인 대상 근골격·통증 진료는 수요가 꾸준합니다. 퇴근 후 진료 시간 운영이 핵심입니다.")

    if group == PatientGroup.STUDENTS and profile.avg_revenue_per_patient > STUDENT_HIGH_PRICE:
        issues.append(
            f"학생 대상 객단가 {format_won(profile.avg_revenue_per_patient)}원 (입력값)은 높은 편입니다. "
            "가격 부담으로 이탈할 수 있습니다."
        )
        verdict = verdict.escalate(Verdict.CAUTION)

    if not issues and strengths:
        strengths.append("현재 진료 포지셔닝에 큰 문제가 발견되지 않았습니다.")

    if verdict == Verdict.FIT:
        lead = specialties[0].value if specialties else "주력 분야"
        one_liner = f"{lead} 중심의 포지셔닝이 환자군과 정합합니다."
    else:
        one_liner = "진료 분야와 환자군 사이에 조정이 필요한 부분이 있습니다."

    summary = AnalysisSummary(
        verdict=verdict,
        one_liner=one_liner,
        actions=["대외 홍보 시 주력 분야 1개를 전면에 배치", "환자군 특성에 맞는 진료 시간대·가격 구조 최적화"],
    )
    return PositioningAnalysis(summary=summary, strengths=strengths, issues=issues)


def patients_per_staff_hour(profile: ClinicProfile) -> float:
    """Monthly patients / (staff × daily hours × 25 working days), 0 without staff or hours"""
    if profile.staff_count <= 0 or profile.daily_hours <= 0:
        return 0.0
    return profile.monthly_patients / (profile.staff_count * profile.daily_hours * WORKING_DAYS_PER_MONTH)


def _concentration_risk(concentration: float) -> RiskItem:
    shown = format_number(concentration)
    if concentration > CONCENTRATION_NOT_RECOMMENDED:
        return RiskItem(
            category="매출 집중도",
            level=Verdict.NOT_RECOMMENDED,
            detail=(
                f"특정 진료·보험 유형에 매출의 {shown}% (입력값)가 집중되어 있습니다. "
                "해당 항목의 제도 변경 시 매출이 급감할 수 있습니다."
            ),
        )
    if concentration > CONCENTRATION_CAUTION:
        return RiskItem(
            category="매출 집중도",
            level=Verdict.CAUTION,
            detail=f"매출 집중도 {shown}% (입력값)입니다. 분산을 위한 신규 진료 항목 개발을 검토하십시오.",
        )
    return RiskItem(
        category="매출 집중도",
        level=Verdict.FIT,
        detail=f"매출 집중도 {shown}% (입력값)로 적절히 분산되어 있습니다.",
    )


def _complaint_risk(frequency: ComplaintFrequency) -> RiskItem:
    if frequency == ComplaintFrequency.THREE_PLUS_MONTHLY:
        return RiskItem(
            category="환자 컴플레인",
            level=Verdict.NOT_RECOMMENDED,
            detail=(
                "월 3건 이상의 컴플레인은 운영 체계 또는 서비스 품질에 구조적 문제가 있을 수 있습니다. "
                "즉각적인 원인 분석이 필요합니다."
            ),
        )
    if frequency == ComplaintFrequency.ONE_TO_TWO_MONTHLY:
        return RiskItem(
            category="환자 컴플레인",
            level=Verdict.CAUTION,
            detail="월 1–2건의 컴플레인이 발생하고 있습니다. 유형별 분류 및 재발 방지 대책을 수립하십시오.",
        )
    return RiskItem(
        category="환자 컴플레인",
        level=Verdict.FIT,
        detail="컴플레인 빈도가 낮아 서비스 품질이 안정적입니다.",
    )


def _wait_risk(frequent_wait: bool) -> RiskItem:
    if frequent_wait:
        return RiskItem(
            category="대기 시간",
            level=Verdict.CAUTION,
            detail="대기 시간이 잦다고 응답하셨습니다. 예약 시스템 도입 또는 진료 흐름 개선을 검토하십시오.",
        )
    return RiskItem(category="대기 시간", level=Verdict.FIT, detail="대기 시간 관련 문제가 보고되지 않았습니다.")


def analyze_risk(profile: ClinicProfile) -> RiskAnalysis:
    """
    Operational risk register.

    Revenue concentration, complaints and wait time are always assessed.
    Staff workload and non-insurance dependency are additional flags that only
    appear when their threshold is exceeded. Overall verdict is the worst item level.
    """
    risks = [
        _concentration_risk(profile.revenue_concentration),
        _complaint_risk(profile.complaint_frequency),
        _wait_risk(profile.frequent_wait),
    ]

    workload = patients_per_staff_hour(profile)
    if workload > PATIENTS_PER_STAFF_HOUR_LIMIT:
        risks.append(
            RiskItem(
                category="인력 부하",
                level=Verdict.CAUTION,
                detail=(
                    f"직원 1인당 시간당 환자 수가 약 {workload:.1f}명 (추정치)으로 높습니다. "
                    "서비스 품질 저하 및 이직 위험이 있습니다."
                ),
            )
        )

    if profile.non_insurance_ratio > NON_INSURANCE_DEPENDENCY_LIMIT:
        risks.append(
            RiskItem(
                category="비급여 의존도",
                level=Verdict.CAUTION,
                detail=(
                    f"비급여 비중이 {format_number(profile.non_insurance_ratio)}% (입력값)로 높습니다. "
                    "경기 침체 시 환자 이탈 위험이 큽니다."
                ),
            )
        )

    verdict = Verdict.worst(risk.level for risk in risks)

    if verdict == Verdict.NOT_RECOMMENDED:
        one_liner = "즉각적인 대응이 필요한 고위험 항목이 있습니다."
        actions = ["고위험 항목을 최우선으로 대응", "90일 이내 개선 계획 수립 및 실행"]
    elif verdict == Verdict.CAUTION:
        one_liner = "일부 리스크 항목에서 개선이 필요합니다."
        actions = ["주의 항목을 분기 내 점검·개선", "정기적인 리스크 모니터링 체계 구축"]
    else:
        one_liner = "주요 운영 리스크가 관리 가능한 수준입니다."
        actions = ["현 수준 유지 및 분기별 리스크 재점검", "신규 리스크 항목(제도 변경 등) 모니터링"]

    return RiskAnalysis(
        summary=AnalysisSummary(verdict=verdict, one_liner=one_liner, actions=actions),
        risks=risks,
    )
