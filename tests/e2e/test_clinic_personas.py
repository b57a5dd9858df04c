"""
E2E tests for clinic personas run through every analysis tab.

Each persona is a complete profile sent to the API; the LLM is replaced by the
fake client from conftest.

Clinic personas:
- clinic_steady: Established musculoskeletal clinic, healthy margins
- clinic_costly_site: Pre-opening clinic in an expensive retail unit
- clinic_thin_margin: High fixed costs, margin below 10%
- clinic_fragile: Concentrated revenue and frequent complaints
- clinic_leader: Above industry average on every benchmark metric
- clinic_scattered: Five specialties aimed at price-sensitive students
"""

import pytest
from fastapi.testclient import TestClient


def _analyze(client: TestClient, profile: dict, tab: str) -> dict:
    response = client.post("/v1/analyze", json={"tab": tab, "profile": profile})
    assert response.status_code == 200, response.text
    return response.json()


def _verdict(client: TestClient, profile: dict, tab: str) -> str:
    return _analyze(client, profile, tab)["deterministic"]["summary"]["verdict"]


@pytest.mark.integration
def test_clinic_steady(client: TestClient, profile_payload):
    """
    clinic_steady: 50,000원 × 300명, margin 27%
    Expected: fit everywhere except the benchmark
    """
    for tab in ["location", "coo", "positioning", "risk", "simulator"]:
        assert _verdict(client, profile_payload, tab) == "fit", f"{tab} should be fit"

    benchmark = _analyze(client, profile_payload, "benchmark")["deterministic"]
    assert benchmark["overall_score"] == 14
    assert benchmark["summary"]["verdict"] == "not_recommended"


@pytest.mark.integration
def test_clinic_costly_site(client: TestClient, profile_payload):
    """
    clinic_costly_site: rent 5,400,000원 (36% of revenue), not yet open
    Expected: location not recommended
    """
    profile = dict(
        profile_payload,
        opening_status="개원 예정",
        building_type="상가",
        monthly_rent=5400000,
        labor_cost=3000000,
    )
    data = _analyze(client, profile, "location")

    assert data["deterministic"]["summary"]["verdict"] == "not_recommended"
    assert len(data["deterministic"]["issues"]) == 2
    assert data["financials"]["rent_ratio"] == 36


@pytest.mark.integration
def test_clinic_thin_margin(client: TestClient, profile_payload):
    """
    clinic_thin_margin: costs 14,000,000원 against 15,000,000원 revenue
    Expected: operations/finance not recommended
    """
    profile = dict(profile_payload, other_fixed_cost=4000000, includes_owner_salary=False)
    data = _analyze(client, profile, "coo")["deterministic"]

    assert data["summary"]["verdict"] == "not_recommended"
    assert data["financials"]["operating_margin"] == 7
    assert any("원장 인건비" in issue for issue in data["issues"])


@pytest.mark.integration
def test_clinic_fragile(client: TestClient, profile_payload):
    """
    clinic_fragile: 65% revenue concentration, 3+ complaints a month, long waits
    Expected: risk not recommended, every category reported
    """
    profile = dict(
        profile_payload,
        revenue_concentration=65,
        complaint_frequency="월 3건 이상",
        frequent_wait=True,
        non_insurance_ratio=80,
    )
    data = _analyze(client, profile, "risk")["deterministic"]

    assert data["summary"]["verdict"] == "not_recommended"
    levels = {risk["category"]: risk["level"] for risk in data["risks"]}
    assert levels == {
        "매출 집중도": "not_recommended",
        "환자 컴플레인": "not_recommended",
        "대기 시간": "caution",
        "비급여 의존도": "caution",
    }


@pytest.mark.integration
def test_clinic_leader(client: TestClient, profile_payload):
    """
    clinic_leader: 70,000원 × 500명, lean cost base
    Expected: benchmark 100, investment recovered early
    """
    profile = dict(
        profile_payload,
        avg_revenue_per_patient=70000,
        monthly_patients=500,
        labor_cost=7000000,
        other_fixed_cost=2000000,
        variable_cost_estimate=3000000,
    )
    benchmark = _analyze(client, profile, "benchmark")["deterministic"]
    simulator = _analyze(client, profile, "simulator")["deterministic"]

    assert benchmark["overall_score"] == 100
    assert benchmark["summary"]["verdict"] == "fit"
    assert simulator["summary"]["verdict"] == "fit"
    assert simulator["scenarios"][1]["roi_month"] <= 6


@pytest.mark.integration
def test_clinic_scattered(client: TestClient, profile_payload):
    """
    clinic_scattered: all five specialties, students, 90,000원 per visit
    Expected: positioning caution, one package per specialty
    """
    profile = dict(
        profile_payload,
        patient_group="학생",
        avg_revenue_per_patient=90000,
        specialties=["다이어트·미용", "교통사고", "근골격·통증", "내과·탕약", "자율신경·정신신체"],
    )
    positioning = _analyze(client, profile, "positioning")["deterministic"]
    package = _analyze(client, profile, "package")["deterministic"]

    assert positioning["summary"]["verdict"] == "caution"
    assert len(positioning["issues"]) == 3
    assert [p["name"] for p in package["packages"]] == [
        "통증 집중 관리 패키지",
        "교통사고 후유증 케어",
        "스트레스·불면 관리 프로그램",
        "체질 개선 탕약 프로그램",
        "한방 체형 관리 코스",
    ]
    assert package["summary"]["verdict"] == "fit"


@pytest.mark.integration
def test_stored_profile_flow(client: TestClient, profile_payload, narrative_client):
    """Save once, analyze every tab against the store, then chat"""
    assert client.post("/v1/clinic", json=profile_payload).status_code == 200

    for tab in ["location", "coo", "package", "positioning", "risk", "simulator", "benchmark"]:
        response = client.post("/v1/analyze", json={"tab": tab})
        assert response.status_code == 200
        assert response.json()["deterministic"]["kind"] == tab

    # Five narrative-capable tabs
    assert len(narrative_client.calls) == 5

    reply = client.post("/v1/chat", json={"message": "재진율을 높이는 방법은?"})
    assert reply.status_code == 200
    assert reply.json()["reply"]
