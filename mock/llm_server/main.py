from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import List
import os
import time

# OpenAI-compatible stub for local development: LLM_BASE_URL=http://localhost:8001/v1
app = FastAPI(title="Mock LLM Server", version="1.0.0")
FAIL_MODE = os.environ.get("MOCK_LLM_FAIL", "")  # "", "500", "empty"


class Message(BaseModel):
    role: str
    content: str


class CompletionRequest(BaseModel):
    model: str
    messages: List[Message]
    temperature: float = 0.2
    max_tokens: int = 800


@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/v1/chat/completions")
def chat_completions(body: CompletionRequest):
    if FAIL_MODE == "500":
        raise HTTPException(status_code=500, detail="mock failure")
    system = body.messages[0].content.splitlines()[0] if body.messages else ""
    content = "" if FAIL_MODE == "empty" else f"## 모의 분석\n- 역할: {system}\n- 입력 메시지 {len(body.messages)}개를 확인했습니다."
    return {
        "id": f"mock-{int(time.time())}",
        "object": "chat.completion",
        "model": body.model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }
