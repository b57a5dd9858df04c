"""Pydantic schemas for API request/response validation"""

import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from clinic_compass.domain.models import (
    AnalysisKind,
    BenchmarkAnalysis,
    BuildingType,
    ClinicProfile,
    ComplaintFrequency,
    CooAnalysis,
    Financials,
    LocationAnalysis,
    OpeningStatus,
    PackageAnalysis,
    PatientGroup,
    PositioningAnalysis,
    RevisitRange,
    RiskAnalysis,
    SimulatorAnalysis,
    Specialty,
)


class ClinicProfileSchema(BaseModel):
    """Clinic profile as submitted by the setup wizard and returned by the store"""

    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Basic info
    opening_status: OpeningStatus
    region_city: str = Field(..., description="City / district (시/군/구)")
    region_dong: str = Field(..., description="Neighbourhood (동)")
    building_type: BuildingType

    # Practice structure
    specialties: List[Specialty] = Field(..., min_length=1)
    patient_group: PatientGroup

    # Revenue structure
    avg_revenue_per_patient: int = Field(..., ge=0, description="Average revenue per visit (원)")
    revisit_range: RevisitRange
    monthly_patients: int = Field(..., ge=0)
    non_insurance_ratio: float = Field(..., ge=0, le=100, description="Non-insurance revenue share (%)")

    # Cost structure
    monthly_rent: int = Field(..., ge=0)
    labor_cost: int = Field(..., ge=0)
    other_fixed_cost: int = Field(..., ge=0)
    variable_cost_estimate: int = Field(..., ge=0)
    includes_owner_salary: bool

    # Initial investment
    deposit_amount: int = Field(0, ge=0)
    key_money: int = Field(0, ge=0)
    interior_cost: int = Field(0, ge=0)
    equipment_cost: int = Field(0, ge=0)
    initial_stock_cost: int = Field(0, ge=0)
    other_initial_cost: int = Field(0, ge=0)

    # Operations and risk
    staff_count: int = Field(..., ge=0)
    daily_hours: float = Field(..., ge=1, le=24)
    frequent_wait: bool
    complaint_frequency: ComplaintFrequency
    revenue_concentration: float = Field(..., ge=0, le=100, description="Share of largest revenue source (%)")

    @field_validator("region_city", "region_dong")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("specialties")
    @classmethod
    def reject_duplicate_specialties(cls, value: List[Specialty]) -> List[Specialty]:
        if len(set(value)) != len(value):
            raise ValueError("specialties must not repeat")
        return value

    def to_domain(self) -> ClinicProfile:
        """Build the domain value object, filling identity fields the client left out"""
        now = datetime.now(timezone.utc).isoformat()
        data = self.model_dump(exclude={"id", "created_at", "updated_at", "specialties"})
        return ClinicProfile(
            id=self.id or str(uuid.uuid4()),
            created_at=self.created_at or now,
            updated_at=self.updated_at or now,
            specialties=tuple(self.specialties),
            **data,
        )

    @classmethod
    def from_domain(cls, profile: ClinicProfile) -> "ClinicProfileSchema":
        return cls(**asdict(profile))


class ClinicProfileResponse(BaseModel):
    """Response for GET /v1/clinic"""

    profile: Optional[ClinicProfileSchema] = None


class SaveProfileResponse(BaseModel):
    """Response for POST /v1/clinic"""

    success: bool
    profile: ClinicProfileSchema


class DeleteProfileResponse(BaseModel):
    """Response for DELETE /v1/clinic"""

    success: bool


# One case per analysis tab, selected by the `kind` tag
AnalysisResultSchema = Annotated[
    Union[
        LocationAnalysis,
        CooAnalysis,
        PackageAnalysis,
        PositioningAnalysis,
        RiskAnalysis,
        SimulatorAnalysis,
        BenchmarkAnalysis,
    ],
    Field(discriminator="kind"),
]


class AnalyzeRequest(BaseModel):
    """Request body for POST /v1/analyze"""

    tab: str = Field(..., description="Analysis tab identifier")
    profile: Optional[ClinicProfileSchema] = Field(None, description="Defaults to the stored profile")
    include_narrative: bool = True


class AnalyzeResponse(BaseModel):
    """Response for POST /v1/analyze"""

    tab: AnalysisKind
    deterministic: AnalysisResultSchema
    financials: Financials
    narrative: Optional[str] = None
    narrative_diagnostic: Optional[str] = None


class ChatMessageSchema(BaseModel):
    """Prior chat turn"""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Request body for POST /v1/chat"""

    message: str
    history: List[ChatMessageSchema] = Field(default_factory=list)
    profile: Optional[ClinicProfileSchema] = None


class ChatResponse(BaseModel):
    """Response for POST /v1/chat"""

    reply: str
