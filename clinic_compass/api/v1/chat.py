"""POST /v1/chat - free-form questions against the clinic profile"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from clinic_compass.api.dependencies import get_narrative_client, get_request_id, resolve_profile
from clinic_compass.api.v1.schemas import ChatRequest, ChatResponse
from clinic_compass.config import settings
from clinic_compass.domain.exceptions import ProfileNotFoundError
from clinic_compass.domain.models import ChatTurn
from clinic_compass.domain.prompts import build_chat_messages
from clinic_compass.infrastructure.clients.narrative import NarrativeClient
from clinic_compass.infrastructure.database.session import get_db

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request_body: ChatRequest,
    request: Request,
    db: Session = Depends(get_db),
    narrative_client: NarrativeClient = Depends(get_narrative_client),
):
    """
    Answer a question using the profile as context.

    Only the most recent history turns are forwarded to the LLM.
    Returns 502 when the LLM produces no reply.
    """
    request_id = get_request_id(request)
    message = request_body.message.strip()

    if not message:
        raise HTTPException(status_code=400, detail="메시지를 입력해주십시오")
    if len(message) > settings.chat_max_message_chars:
        raise HTTPException(
            status_code=400,
            detail=f"메시지는 {settings.chat_max_message_chars}자 이하로 입력해주십시오",
        )

    try:
        profile = resolve_profile(request_body.profile, db)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    history = [ChatTurn(role=turn.role, content=turn.content) for turn in request_body.history]
    messages = build_chat_messages(profile, history, message, history_limit=settings.chat_history_limit)

    result = await narrative_client.generate(messages, request_id=request_id)
    if not result.available:
        logging.warning("Chat reply unavailable", extra={"request_id": request_id, "diagnostic": result.diagnostic})
        raise HTTPException(
            status_code=502,
            detail=f"LLM 응답을 받지 못했습니다. 잠시 후 다시 시도해주십시오. ({result.diagnostic})",
        )

    return ChatResponse(reply=result.narrative)
