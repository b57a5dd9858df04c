"""Domain models - pure Python dataclasses representing the clinic profile and analysis results"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Literal, Optional, Tuple


class OpeningStatus(str, Enum):
    PRE_OPENING = "개원 예정"
    UNDER_ONE_YEAR = "1년 미만"
    ONE_TO_THREE_YEARS = "1–3년"
    OVER_THREE_YEARS = "3년 이상"


class BuildingType(str, Enum):
    RETAIL = "상가"
    MIXED_USE = "주상복합"
    MEDICAL = "메디컬빌딩"
    OTHER = "기타"


class Specialty(str, Enum):
    MUSCULOSKELETAL = "근골격·통증"
    TRAFFIC_ACCIDENT = "교통사고"
    AUTONOMIC = "자율신경·정신신체"
    HERBAL_MEDICINE = "내과·탕약"
    DIET_AESTHETICS = "다이어트·미용"


class PatientGroup(str, Enum):
    OFFICE_WORKERS = "직장인"
    STUDENTS = "학생"
    ELDERLY = "노년층"
    WOMEN = "여성 위주"
    MIXED = "혼합"


class RevisitRange(str, Enum):
    UNDER_30 = "<30%"
    FROM_30_TO_50 = "30–50%"
    FROM_50_TO_70 = "50–70%"
    OVER_70 = "70% 이상"


class ComplaintFrequency(str, Enum):
    RARE = "거의 없음"
    ONE_TO_TWO_MONTHLY = "월 1–2건"
    THREE_PLUS_MONTHLY = "월 3건 이상"


class Verdict(str, Enum):
    """Ordered severity surfaced by every analysis (fit < caution < not_recommended)"""

    FIT = "fit"
    CAUTION = "caution"
    NOT_RECOMMENDED = "not_recommended"

    @property
    def severity(self) -> int:
        return _VERDICT_SEVERITY[self]

    @property
    def label(self) -> str:
        return _VERDICT_LABELS[self]

    def escalate(self, other: "Verdict") -> "Verdict":
        """Return the more severe of the two verdicts"""
        return other if other.severity > self.severity else self

    @classmethod
    def worst(cls, verdicts: Iterable["Verdict"]) -> "Verdict":
        result = cls.FIT
        for verdict in verdicts:
            result = result.escalate(verdict)
        return result


_VERDICT_SEVERITY = {Verdict.FIT: 0, Verdict.CAUTION: 1, Verdict.NOT_RECOMMENDED: 2}
_VERDICT_LABELS = {Verdict.FIT: "적합", Verdict.CAUTION: "주의 필요", Verdict.NOT_RECOMMENDED: "비추천"}


class AnalysisKind(str, Enum):
    """Analysis tabs exposed by the API"""

    LOCATION = "location"
    COO = "coo"
    PACKAGE = "package"
    POSITIONING = "positioning"
    RISK = "risk"
    SIMULATOR = "simulator"
    BENCHMARK = "benchmark"

    @property
    def supports_narrative(self) -> bool:
        return self not in (AnalysisKind.SIMULATOR, AnalysisKind.BENCHMARK)


@dataclass(frozen=True)
class ClinicProfile:
    """Clinic business profile collected by the setup wizard (validated upstream)"""

    id: str
    created_at: str
    updated_at: str

    # Basic info
    opening_status: OpeningStatus
    region_city: str
    region_dong: str
    building_type: BuildingType

    # Practice structure
    specialties: Tuple[Specialty, ...]
    patient_group: PatientGroup

    # Revenue structure
    avg_revenue_per_patient: int
    revisit_range: RevisitRange
    monthly_patients: int
    non_insurance_ratio: float

    # Cost structure
    monthly_rent: int
    labor_cost: int
    other_fixed_cost: int
    variable_cost_estimate: int
    includes_owner_salary: bool

    # Operations and risk
    staff_count: int
    daily_hours: float
    frequent_wait: bool
    complaint_frequency: ComplaintFrequency
    revenue_concentration: float

    # Initial investment (simulator only)
    deposit_amount: int = 0
    key_money: int = 0
    interior_cost: int = 0
    equipment_cost: int = 0
    initial_stock_cost: int = 0
    other_initial_cost: int = 0

    @property
    def initial_investment(self) -> int:
        return (
            self.deposit_amount
            + self.key_money
            + self.interior_cost
            + self.equipment_cost
            + self.initial_stock_cost
            + self.other_initial_cost
        )


@dataclass
class Financials:
    """Ratios and break-even figures derived from a profile"""

    monthly_revenue: int
    total_fixed_cost: int
    total_cost: int
    operating_profit: int
    operating_margin: int  # %
    rent_ratio: int  # %
    labor_ratio: int  # %
    break_even_patients: int


@dataclass
class AnalysisSummary:
    verdict: Verdict
    one_liner: str
    actions: List[str]


@dataclass
class LocationAnalysis:
    summary: AnalysisSummary
    strengths: List[str]
    issues: List[str]
    kind: Literal["location"] = "location"


@dataclass
class CooAnalysis:
    summary: AnalysisSummary
    insights: List[str]
    issues: List[str]
    financials: Financials
    kind: Literal["coo"] = "coo"


@dataclass
class PackageItem:
    name: str
    description: str
    target_price: str
    sessions: str
    rationale: str


@dataclass
class PackageAnalysis:
    summary: AnalysisSummary
    packages: List[PackageItem]
    non_insurance_note: str
    kind: Literal["package"] = "package"


@dataclass
class PositioningAnalysis:
    summary: AnalysisSummary
    strengths: List[str]
    issues: List[str]
    kind: Literal["positioning"] = "positioning"


@dataclass
class RiskItem:
    category: str
    level: Verdict
    detail: str


@dataclass
class RiskAnalysis:
    summary: AnalysisSummary
    risks: List[RiskItem]
    kind: Literal["risk"] = "risk"


@dataclass
class MonthlyProjection:
    month: int
    patients: int
    revenue: int
    cost: int
    profit: int
    cumulative_profit: int


@dataclass
class SimulatorScenario:
    """One growth-rate assumption projected over the simulation horizon"""

    label: str
    growth_rate: float  # monthly %
    projections: List[MonthlyProjection]
    break_even_month: Optional[int]  # first month with profit >= 0
    roi_month: Optional[int]  # first month with cumulative profit >= 0


@dataclass
class SimulatorAnalysis:
    summary: AnalysisSummary
    initial_investment: int
    scenarios: List[SimulatorScenario]
    kind: Literal["simulator"] = "simulator"


@dataclass
class BenchmarkItem:
    label: str
    my_value: float
    industry_avg: float
    unit: str
    higher_is_better: bool

    @property
    def is_favorable(self) -> bool:
        if self.higher_is_better:
            return self.my_value >= self.industry_avg
        return self.my_value <= self.industry_avg


@dataclass
class BenchmarkAnalysis:
    summary: AnalysisSummary
    items: List[BenchmarkItem]
    overall_score: int  # 0-100
    kind: Literal["benchmark"] = "benchmark"


@dataclass
class ChatTurn:
    role: str  # "system" | "user" | "assistant"
    content: str


@dataclass
class NarrativeResult:
    """Best-effort narrative outcome: exactly one of narrative / diagnostic is set"""

    narrative: Optional[str] = None
    diagnostic: Optional[str] = None

    @property
    def available(self) -> bool:
        return bool(self.narrative)

