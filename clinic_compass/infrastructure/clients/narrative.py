"""LLM completion client for narrative analysis and chat replies"""

import logging
from typing import Optional, Sequence

import httpx

from clinic_compass.config import settings
from clinic_compass.domain.exceptions import NarrativeServiceError
from clinic_compass.domain.models import ChatTurn, NarrativeResult
from clinic_compass.domain.prompts import clean_narrative
from clinic_compass.infrastructure.observability.metrics import narrative_failures_counter, narrative_latency_histogram

logger = logging.getLogger(__name__)


class NarrativeClient:
    """Client for an OpenAI-compatible chat completions endpoint"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.llm_base_url).strip().rstrip("/")
        self.api_key = (api_key or settings.llm_api_key).strip()
        self.model = (model or settings.llm_model).strip()
        self.timeout = timeout or settings.llm_timeout_seconds
        self.transport = transport

    async def complete(self, messages: Sequence[ChatTurn]) -> str:
        """
        Request a single completion and return the cleaned text.

        Raises:
            NarrativeServiceError: On timeout, HTTP errors, malformed body, or empty completion
        """
        payload = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": settings.llm_temperature,
            "max_tokens": settings.llm_max_tokens,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with narrative_latency_histogram.time():
                    response = await client.post(
                        f"{self.base_url}/chat/completions",
                        json=payload,
                        headers={"Authorization": f"Bearer {self.api_key}"},
                    )
                response.raise_for_status()
                data = response.json()
                content = data["choices"][0]["message"]["content"] or ""
                if not isinstance(content, str):
                    raise TypeError(f"completion content is {type(content).__name__}, expected str")

            except httpx.TimeoutException as e:
                narrative_failures_counter.labels(reason="timeout").inc()
                raise NarrativeServiceError(f"LLM timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                narrative_failures_counter.labels(reason="http_status").inc()
                raise NarrativeServiceError(f"LLM error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                narrative_failures_counter.labels(reason="transport").inc()
                raise NarrativeServiceError(f"LLM unreachable: {e.__class__.__name__}") from e
            except (KeyError, IndexError, ValueError, TypeError) as e:
                narrative_failures_counter.labels(reason="invalid_response").inc()
                raise NarrativeServiceError(f"Invalid completion payload from LLM: {e}") from e

        text = clean_narrative(content.strip())
        if not text:
            narrative_failures_counter.labels(reason="empty").inc()
            raise NarrativeServiceError("LLM returned an empty completion")
        return text

    async def generate(self, messages: Sequence[ChatTurn], request_id: Optional[str] = None) -> NarrativeResult:
        """Best-effort completion: failures become a diagnostic, never an exception"""
        try:
            return NarrativeResult(narrative=await self.complete(messages))
        except NarrativeServiceError as e:
            logger.warning(f"Narrative unavailable: {e}", extra={"request_id": request_id})
            return NarrativeResult(diagnostic=str(e))
