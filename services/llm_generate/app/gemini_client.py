"""Gemini ``generateContent`` REST client.

The API key is read per request from the settings store, so calls go
straight to the REST endpoint with the key in the ``x-goog-api-key``
header rather than through a process-wide configured SDK client.

Failure classes:
- ``InferenceRejected``: Gemini answered 400/404, i.e. the key or model in
  the settings document is wrong. Operators must fix configuration.
- ``EmptyInferenceResponse``: a 200 without usable text (blocked prompt,
  empty candidate list, safety stop).
- ``InferenceError``: everything else (timeouts, 5xx, transport errors).
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from shared.settings import Settings
from shared.tracing import estimate_tokens, get_logger, log_event, span

_log = get_logger("gemini_client")

GENERATION_CONFIG: Dict[str, Any] = {
    "temperature": 0.3,
    "topP": 0.9,
    "topK": 40,
    "maxOutputTokens": 2048,
}

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_SETTINGS: List[Dict[str, str]] = [
    {"category": c, "threshold": "BLOCK_MEDIUM_AND_ABOVE"} for c in HARM_CATEGORIES
]


class InferenceError(Exception):
    """Generic failure calling Gemini."""


class InferenceRejected(InferenceError):
    """Gemini rejected the request as malformed (bad key or unknown model)."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        super().__init__(f"Gemini rejected request with HTTP {status_code}: {detail}")
        self.status_code = status_code


class EmptyInferenceResponse(InferenceError):
    """Gemini returned no answer text."""


def build_payload(system_instruction: str, user_message: str) -> Dict[str, Any]:
    return {
        "systemInstruction": {"parts": [{"text": system_instruction}]},
        "contents": [{"role": "user", "parts": [{"text": user_message}]}],
        "generationConfig": dict(GENERATION_CONFIG),
        "safetySettings": [dict(s) for s in SAFETY_SETTINGS],
    }


def extract_text(data: Dict[str, Any]) -> str:
    """Join the text parts of the first candidate with newlines.

    Raises:
        EmptyInferenceResponse: when there is no candidate or no text.
    """
    candidates = data.get("candidates") or []
    if not candidates:
        reason = (data.get("promptFeedback") or {}).get("blockReason")
        raise EmptyInferenceResponse(f"no candidates (blockReason={reason})")

    first = candidates[0] or {}
    parts = (first.get("content") or {}).get("parts") or []
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    text = "\n".join(texts)
    if not text.strip():
        raise EmptyInferenceResponse(
            f"candidate has no text (finishReason={first.get('finishReason')})"
        )
    return text


class GeminiClient:
    """Async client for a single ``generateContent`` call per request."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        s = Settings()
        self.base_url = (base_url or s.gemini_api_base).rstrip("/")
        self.timeout = timeout if timeout is not None else s.gemini_timeout_seconds
        self._transport = transport

    async def _post(self, url: str, payload: Dict[str, Any], api_key: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=min(10.0, self.timeout)),
            transport=self._transport,
        ) as client:
            return await client.post(
                url, json=payload, headers={"x-goog-api-key": api_key}
            )

    async def generate(
        self, api_key: str, model: str, system_instruction: str, user_message: str
    ) -> str:
        url = f"{self.base_url}/models/{model}:generateContent"
        payload = build_payload(system_instruction, user_message)
        try:
            with span(
                "gemini.generate",
                model=model,
                prompt_tokens=estimate_tokens(user_message),
            ):
                # httpx timeouts are per phase; the whole call gets one deadline
                r = await asyncio.wait_for(
                    self._post(url, payload, api_key), timeout=self.timeout
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise InferenceError(f"Gemini call timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise InferenceError(f"Gemini call failed: {e}") from e

        if r.status_code in (400, 404):
            _log.error("Gemini API error response (%s): %s", r.status_code, r.text[:2000])
            raise InferenceRejected(r.status_code, r.text[:500])
        if r.status_code >= 400:
            _log.error("Gemini API error response (%s): %s", r.status_code, r.text[:2000])
            raise InferenceError(f"Gemini returned HTTP {r.status_code}")

        try:
            data = r.json()
        except ValueError as e:
            raise InferenceError("Gemini returned a non-JSON body") from e

        text = extract_text(data)
        log_event(
            "Generation",
            payload={
                "model": model,
                "prompt_tokens": estimate_tokens(user_message),
                "output_tokens": estimate_tokens(text),
            },
        )
        return text
