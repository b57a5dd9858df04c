"""Pytest fixtures for testing"""

import os

# Must be set before clinic_compass.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest
from dataclasses import replace
from typing import Any, Callable, Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from clinic_compass.api.main import create_app
from clinic_compass.api.dependencies import get_narrative_client
from clinic_compass.infrastructure.database.models import Base
from clinic_compass.infrastructure.database.session import get_db
from clinic_compass.domain.models import (
    BuildingType,
    ChatTurn,
    ClinicProfile,
    ComplaintFrequency,
    NarrativeResult,
    OpeningStatus,
    PatientGroup,
    RevisitRange,
    Specialty,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeNarrativeClient:
    """Records prompts and returns a canned narrative (or a failure diagnostic)"""

    def __init__(self, reply: Optional[str] = "## 분석 결과\n- 모의 응답입니다.", diagnostic: str = "LLM error: 503"):
        self.reply = reply
        self.diagnostic = diagnostic
        self.calls: List[List[ChatTurn]] = []

    async def generate(self, messages, request_id=None) -> NarrativeResult:
        self.calls.append(list(messages))
        if self.reply:
            return NarrativeResult(narrative=self.reply)
        return NarrativeResult(diagnostic=self.diagnostic)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def narrative_client() -> FakeNarrativeClient:
    return FakeNarrativeClient()


@pytest.fixture
def client(db: Session, narrative_client: FakeNarrativeClient) -> TestClient:
    """Create FastAPI test client with test database and fake LLM"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_narrative_client] = lambda: narrative_client
    return TestClient(app)


@pytest.fixture
def base_profile() -> ClinicProfile:
    """
    Healthy mid-size clinic.

    50,000원 × 300명 = 15,000,000원 revenue; costs 11,000,000원;
    margin 27%, rent ratio 20%, labor ratio 33%, break-even 208 patients;
    initial investment 90,000,000원.
    """
    return ClinicProfile(
        id="clinic-1",
        created_at="2026-01-01T00:00:00+00:00",
        updated_at="2026-01-01T00:00:00+00:00",
        opening_status=OpeningStatus.ONE_TO_THREE_YEARS,
        region_city="서울 마포구",
        region_dong="서교동",
        building_type=BuildingType.MEDICAL,
        specialties=(Specialty.MUSCULOSKELETAL,),
        patient_group=PatientGroup.MIXED,
        avg_revenue_per_patient=50_000,
        revisit_range=RevisitRange.FROM_50_TO_70,
        monthly_patients=300,
        non_insurance_ratio=40,
        monthly_rent=3_000_000,
        labor_cost=5_000_000,
        other_fixed_cost=1_000_000,
        variable_cost_estimate=2_000_000,
        includes_owner_salary=True,
        staff_count=4,
        daily_hours=9,
        frequent_wait=False,
        complaint_frequency=ComplaintFrequency.RARE,
        revenue_concentration=30,
        deposit_amount=30_000_000,
        key_money=10_000_000,
        interior_cost=30_000_000,
        equipment_cost=15_000_000,
        initial_stock_cost=3_000_000,
        other_initial_cost=2_000_000,
    )


@pytest.fixture
def make_profile(base_profile: ClinicProfile) -> Callable[..., ClinicProfile]:
    """Factory: base profile with selected fields overridden"""

    def _make(**overrides: Any) -> ClinicProfile:
        return replace(base_profile, **overrides)

    return _make


@pytest.fixture
def profile_payload() -> Dict[str, Any]:
    """Request body matching base_profile"""
    return {
        "opening_status": "1–3년",
        "region_city": "서울 마포구",
        "region_dong": "서교동",
        "building_type": "메디컬빌딩",
        "specialties": ["근골격·통증"],
        "patient_group": "혼합",
        "avg_revenue_per_patient": 50000,
        "revisit_range": "50–70%",
        "monthly_patients": 300,
        "non_insurance_ratio": 40,
        "monthly_rent": 3000000,
        "labor_cost": 5000000,
        "other_fixed_cost": 1000000,
        "variable_cost_estimate": 2000000,
        "includes_owner_salary": True,
        "deposit_amount": 30000000,
        "key_money": 10000000,
        "interior_cost": 30000000,
        "equipment_cost": 15000000,
        "initial_stock_cost": 3000000,
        "other_initial_cost": 2000000,
        "staff_count": 4,
        "daily_hours": 9,
        "frequent_wait": False,
        "complaint_frequency": "거의 없음",
        "revenue_concentration": 30,
    }
