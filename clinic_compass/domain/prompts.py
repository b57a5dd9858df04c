"""Narrative prompt builder - profile context and per-tab instructions for the LLM"""

import re
from typing import Dict, List, Sequence, Tuple

from clinic_compass.domain.exceptions import NarrativeNotSupportedError
from clinic_compass.domain.financials import derive_financials
from clinic_compass.domain.models import AnalysisKind, ChatTurn, ClinicProfile
from clinic_compass.utils.number_utils import format_number, format_won

LANGUAGE_RULE = "반드시 한국어로만 작성. 영어·한자 절대 금지. VIP는 프리미엄으로. 하십시오체. 마크다운. 간결하게."

TAB_PROMPTS: Dict[AnalysisKind, str] = {
    AnalysisKind.LOCATION: (
        f"한의원 입지 전문가. {LANGUAGE_RULE}\n"
        "3가지 분석: 1)유효한 진료 포지션 2)피할 경쟁 구조 3)유지 vs 전환. 각 3문장."
    ),
    AnalysisKind.COO: (
        f"한의원 경영분석가. {LANGUAGE_RULE}\n"
        "4가지 분석: 1)시간대비 수익 2)인력추가 손익변화 3)매출 병목 4)비효율 진료. 각 3문장."
    ),
    AnalysisKind.PACKAGE: (
        f"한의원 패키지 설계자. {LANGUAGE_RULE}\n"
        "패키지 3종 설계. 각각: 이름(한글만), 대상, 구성, 가격대, 기간, 추천이유, 주의점. 영어 이름 금지."
    ),
    AnalysisKind.POSITIONING: (
        f"한의원 포지셔닝 전략가. {LANGUAGE_RULE}\n"
        "4가지 분석: 1)현재 포지션 평가 2)과포화 여부 3)차별화 키워드 3개 4)유지할 것/바꿀 것. 각 3문장."
    ),
    AnalysisKind.RISK: (
        f"한의원 리스크 관리자. {LANGUAGE_RULE}\n"
        "3가지 분석: 1)리스크 점수(상/중/하) 2)1년내 문제 시나리오 2가지 3)즉시 개선 3가지. 각 3문장."
    ),
}

CHAT_SYSTEM_PROMPT = """당신은 한의원 경영 컨설팅 분야 최고 전문가입니다. 반드시 한국어로 작성하십시오.

사용자가 자신의 한의원 경영에 대해 자유롭게 질문합니다. 아래 프로필 데이터를 기반으로 구체적이고 실용적인 답변을 제공하십시오.

**답변 원칙:**
1. 하십시오체를 사용합니다.
2. 숫자와 데이터에 기반한 구체적 근거를 제시합니다.
3. 추상적 조언이 아닌, 즉시 실행 가능한 액션 아이템을 제시합니다.
4. 마크다운 형식(##, ###, -, **강조**)을 사용합니다.
5. VIP는 "프리미엄"으로 표기하고, 불필요한 영어 사용은 피합니다.
6. 한의원 업계의 실무적 맥락과 건강보험 제도를 반영합니다.
7. 질문이 모호하면 명확화를 요청하되, 가능한 범위에서 먼저 답변을 제공합니다.
8. 이전 대화 맥락을 참고하여 일관된 조언을 하십시오."""

CHAT_ACKNOWLEDGEMENT = "프로필 데이터를 확인했습니다. 궁금하신 점을 질문해 주십시오."

# Known English terms the model tends to leak, mapped to Korean
REPLACEMENTS: List[Tuple[str, str]] = [
    ("VIP", "프리미엄"),
    ("premium", "프리미엄"),
    ("package", "패키지"),
    ("cost", "비용"),
    ("risk", "위험"),
    ("marketing", "홍보"),
    ("branding", "브랜딩"),
    ("target", "대상"),
    ("feedback", "피드백"),
    ("service", "서비스"),
    ("system", "시스템"),
    ("stress", "스트레스"),
    ("clinic", "한의원"),
    ("patient", "환자"),
    ("revenue", "매출"),
    ("profit", "수익"),
    ("break-even", "손익분기"),
    ("differentiate", "차별화"),
    ("positioning", "포지셔닝"),
    ("consulting", "컨설팅"),
    ("idea", "방안"),
    ("solution", "해결책"),
    ("option", "방안"),
    ("recommend", "추천"),
]
_REPLACEMENT_PATTERNS = [(re.compile(re.escape(term), re.IGNORECASE), korean) for term, korean in REPLACEMENTS]
_HANJA = re.compile(r"[\u4e00-\u9fff]")
# Leftover Latin words of 4+ letters, keeping ones attached to markdown syntax
_LATIN_WORD = re.compile(r"(?<![#*\-\[\]()])\b[a-zA-Z]{4,}\b", re.ASCII)
_SPACE_RUN = re.compile(r"  +")
_BLANK_LINES = re.compile(r"\n{3,}")


def profile_to_context(profile: ClinicProfile) -> str:
    """Render the profile and derived indicators as a labeled text block"""
    fin = derive_financials(profile)
    specialties = ", ".join(s.value for s in profile.specialties)
    return "\n".join(
        [
            "[기본 정보]",
            f"지역: {profile.region_city} {profile.region_dong}, "
            f"{profile.building_type.value}, {profile.opening_status.value}",
            "[진료 구조]",
            f"진료: {specialties} / 환자군: {profile.patient_group.value}",
            "[수익 구조]",
            f"객단가 {format_won(profile.avg_revenue_per_patient)}원, 월 {format_won(profile.monthly_patients)}명, "
            f"재진율 {profile.revisit_range.value}, 비급여 {format_number(profile.non_insurance_ratio)}%",
            "[비용 구조]",
            f"임대료 {format_won(profile.monthly_rent)}원, 인건비 {format_won(profile.labor_cost)}원, "
            f"기타 고정비 {format_won(profile.other_fixed_cost)}원, 변동비 {format_won(profile.variable_cost_estimate)}원"
            f" (원장 인건비 {'포함' if profile.includes_owner_salary else '미포함'})",
            "[재무 지표]",
            f"월매출 {format_won(fin.monthly_revenue)}원, 임대료 비율 {fin.rent_ratio}%, 인건비 비율 {fin.labor_ratio}%, "
            f"이익률 {fin.operating_margin}%, 손익분기 {format_won(fin.break_even_patients)}명/월",
            "[운영]",
            f"직원 {profile.staff_count}명, {format_number(profile.daily_hours)}시간/일, "
            f"대기 {'잦음' if profile.frequent_wait else '양호'}, 컴플레인 {profile.complaint_frequency.value}, "
            f"매출집중 {format_number(profile.revenue_concentration)}%",
        ]
    )


def build_messages(kind: AnalysisKind, profile: ClinicProfile) -> List[ChatTurn]:
    """System instruction for the tab followed by the profile context"""
    if kind not in TAB_PROMPTS:
        raise NarrativeNotSupportedError(f"No narrative prompt for analysis tab '{kind.value}'")
    return [
        ChatTurn(role="system", content=TAB_PROMPTS[kind]),
        ChatTurn(role="user", content=profile_to_context(profile)),
    ]


def build_chat_messages(
    profile: ClinicProfile,
    history: Sequence[ChatTurn],
    message: str,
    history_limit: int = 20,
) -> List[ChatTurn]:
    """Chat transcript: system prompt, profile context, acknowledgement, recent history, new question"""
    recent = list(history)[-history_limit:] if history_limit > 0 else []
    return [
        ChatTurn(role="system", content=CHAT_SYSTEM_PROMPT),
        ChatTurn(role="user", content=profile_to_context(profile)),
        ChatTurn(role="assistant", content=CHAT_ACKNOWLEDGEMENT),
        *recent,
        ChatTurn(role="user", content=message.strip()),
    ]


def clean_narrative(text: str) -> str:
    """
    Keep LLM output in Korean.

    Strips Hanja, replaces known English terms, drops remaining Latin words
    of 4+ letters (unless attached to markdown syntax), collapses repeated
    spaces and blank lines.
    """
    result = _HANJA.sub("", text)
    for pattern, korean in _REPLACEMENT_PATTERNS:
        result = pattern.sub(korean, result)
    result = _LATIN_WORD.sub("", result)
    result = _SPACE_RUN.sub(" ", result)
    result = _BLANK_LINES.sub("\n\n", result)
    return result.strip()
