"""POST /v1/analyze - deterministic analysis with optional LLM narrative"""

import logging
import time
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from clinic_compass.api.dependencies import get_narrative_client, get_request_id, resolve_profile
from clinic_compass.api.v1.schemas import AnalyzeRequest, AnalyzeResponse
from clinic_compass.domain.analysis import parse_analysis_kind, run_analysis
from clinic_compass.domain.exceptions import ProfileNotFoundError, UnknownAnalysisKindError
from clinic_compass.domain.financials import derive_financials
from clinic_compass.domain.models import AnalysisKind, ClinicProfile, NarrativeResult
from clinic_compass.domain.prompts import build_messages
from clinic_compass.infrastructure.clients.narrative import NarrativeClient
from clinic_compass.infrastructure.database.session import get_db
from clinic_compass.infrastructure.observability.logging import log_analysis
from clinic_compass.infrastructure.observability.metrics import narrative_failures_counter, record_analysis

router = APIRouter()


async def _generate_narrative(
    narrative_client: NarrativeClient,
    kind: AnalysisKind,
    profile: ClinicProfile,
    request_id: str,
) -> NarrativeResult:
    """Narrative step isolated from the deterministic result: any failure becomes a diagnostic"""
    try:
        return await narrative_client.generate(build_messages(kind, profile), request_id=request_id)
    except Exception as e:
        narrative_failures_counter.labels(reason="unexpected").inc()
        logging.error(f"Narrative step failed: {e!r}", extra={"request_id": request_id})
        return NarrativeResult(diagnostic=f"Narrative unavailable: {e.__class__.__name__}")


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    request_body: AnalyzeRequest,
    request: Request,
    db: Session = Depends(get_db),
    narrative_client: NarrativeClient = Depends(get_narrative_client),
):
    """
    Run one analysis tab against a clinic profile.

    Flow:
    1. Validate the tab identifier (closed set of seven)
    2. Resolve the profile (request body, else stored profile)
    3. Run the deterministic analysis and derive financials
    4. For narrative-capable tabs, request LLM text (best effort)
    5. Return deterministic result, financials and narrative together
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        kind = parse_analysis_kind(request_body.tab)
        profile = resolve_profile(request_body.profile, db)

        result = run_analysis(kind, profile)
        financials = derive_financials(profile)

    except UnknownAnalysisKindError as e:
        logging.warning(f"Rejected analysis tab: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Outside the try above: a narrative failure must not turn into a 500
    narrative = NarrativeResult()
    if request_body.include_narrative and kind.supports_narrative:
        narrative = await _generate_narrative(narrative_client, kind, profile, request_id)

    duration_ms = (time.time() - start_time) * 1000
    verdict = result.summary.verdict.value
    record_analysis(kind.value, verdict)
    log_analysis(request_id, kind.value, verdict, narrative.available, duration_ms, narrative.diagnostic)

    return AnalyzeResponse(
        tab=kind,
        deterministic=asdict(result),
        financials=asdict(financials),
        narrative=narrative.narrative,
        narrative_diagnostic=narrative.diagnostic,
    )
