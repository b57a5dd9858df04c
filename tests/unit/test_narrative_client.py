"""Unit tests for the LLM narrative client"""

import json

import httpx
import pytest
from clinic_compass.domain.exceptions import NarrativeServiceError
from clinic_compass.domain.models import ChatTurn
from clinic_compass.infrastructure.clients.narrative import NarrativeClient


MESSAGES = [ChatTurn("system", "한의원 입지 전문가."), ChatTurn("user", "[기본 정보]")]


def _client(handler) -> NarrativeClient:
    return NarrativeClient(
        base_url="http://llm.test/v1/",
        api_key="test-key",
        model="test-model",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def _completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


async def test_complete_posts_openai_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _completion("## 입지 분석\n- 양호합니다.")

    text = await _client(handler).complete(MESSAGES)

    assert text == "## 입지 분석\n- 양호합니다."
    assert seen["url"] == "http://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "한의원 입지 전문가."},
        {"role": "user", "content": "[기본 정보]"},
    ]


async def test_complete_cleans_output():
    text = await _client(lambda request: _completion("  VIP 고객 관리 strategy  ")).complete(MESSAGES)
    assert text == "프리미엄 고객 관리"


async def test_http_error_raises_with_status():
    with pytest.raises(NarrativeServiceError, match="503"):
        await _client(lambda request: httpx.Response(503)).complete(MESSAGES)


async def test_malformed_body_raises():
    with pytest.raises(NarrativeServiceError, match="Invalid completion payload"):
        await _client(lambda request: httpx.Response(200, json={"choices": []})).complete(MESSAGES)


async def test_empty_completion_raises():
    with pytest.raises(NarrativeServiceError, match="empty"):
        await _client(lambda request: _completion("   ")).complete(MESSAGES)


async def test_timeout_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NarrativeServiceError, match="timeout"):
        await _client(handler).complete(MESSAGES)


async def test_connection_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NarrativeServiceError, match="unreachable"):
        await _client(handler).complete(MESSAGES)


async def test_generate_returns_narrative():
    result = await _client(lambda request: _completion("## 결과")).generate(MESSAGES, request_id="req-1")

    assert result.available
    assert result.narrative == "## 결과"
    assert result.diagnostic is None


async def test_generate_never_raises():
    """Failures become a diagnostic instead of an exception"""
    result = await _client(lambda request: httpx.Response(500)).generate(MESSAGES)

    assert not result.available
    assert result.narrative is None
    assert result.diagnostic == "LLM error: 500"


@pytest.mark.parametrize("content", [42, ["## 결과"], {"text": "## 결과"}])
async def test_non_string_content_is_invalid_payload(content):
    with pytest.raises(NarrativeServiceError, match="Invalid completion payload"):
        await _client(lambda request: _completion(content)).complete(MESSAGES)


async def test_generate_turns_non_string_content_into_diagnostic():
    result = await _client(lambda request: _completion(42)).generate(MESSAGES)

    assert not result.available
    assert result.diagnostic.startswith("Invalid completion payload")
