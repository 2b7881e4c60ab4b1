import asyncio
import json

import httpx
import pytest

from services.llm_generate.app.gemini_client import (
    EmptyInferenceResponse,
    GeminiClient,
    InferenceError,
    InferenceRejected,
    extract_text,
)


def _ok(text_parts):
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": t} for t in text_parts]},
                "finishReason": "STOP",
            }
        ]
    }


def _client(handler) -> GeminiClient:
    return GeminiClient(
        base_url="https://gemini.test/v1beta",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def _generate(client: GeminiClient) -> str:
    return asyncio.run(client.generate("secret-key", "gemini-2.5-flash", "SYSTEM", "USER"))


def test_request_shape_and_text_extraction() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_ok(["Yes.***Because."]))

    assert _generate(_client(handler)) == "Yes.***Because."

    assert seen["url"] == "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent"
    assert "secret-key" not in seen["url"]
    assert seen["key"] == "secret-key"
    body = seen["body"]
    assert body["systemInstruction"] == {"parts": [{"text": "SYSTEM"}]}
    assert body["contents"][0]["parts"] == [{"text": "USER"}]
    assert body["generationConfig"] == {
        "temperature": 0.3,
        "topP": 0.9,
        "topK": 40,
        "maxOutputTokens": 2048,
    }
    assert {s["category"] for s in body["safetySettings"]} == {
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    }
    assert {s["threshold"] for s in body["safetySettings"]} == {"BLOCK_MEDIUM_AND_ABOVE"}


def test_multiple_parts_are_joined_with_newlines() -> None:
    assert extract_text(_ok(["First.", "Second."])) == "First.\nSecond."


@pytest.mark.parametrize("status", [400, 404])
def test_bad_request_and_unknown_model_are_rejections(status) -> None:
    def handler(request):
        return httpx.Response(status, json={"error": {"message": "models/x is not found"}})

    with pytest.raises(InferenceRejected) as exc:
        _generate(_client(handler))
    assert exc.value.status_code == status


@pytest.mark.parametrize("status", [403, 429, 500, 503])
def test_other_errors_are_generic(status) -> None:
    def handler(request):
        return httpx.Response(status, json={"error": {"message": "nope"}})

    with pytest.raises(InferenceError) as exc:
        _generate(_client(handler))
    assert not isinstance(exc.value, InferenceRejected)


def test_timeout_is_generic_failure() -> None:
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(InferenceError) as exc:
        _generate(_client(handler))
    assert "timed out" in str(exc.value)


def test_slow_response_hits_overall_deadline() -> None:
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json=_ok(["late"]))

    client = GeminiClient(
        base_url="https://gemini.test/v1beta",
        timeout=0.05,
        transport=httpx.MockTransport(handler),
    )
    with pytest.raises(InferenceError) as exc:
        _generate(client)
    assert "timed out after 0.05s" in str(exc.value)


def test_blocked_prompt_is_empty_response() -> None:
    def handler(request):
        return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

    with pytest.raises(EmptyInferenceResponse) as exc:
        _generate(_client(handler))
    assert "SAFETY" in str(exc.value)


def test_candidate_without_text_is_empty_response() -> None:
    with pytest.raises(EmptyInferenceResponse):
        extract_text({"candidates": [{"content": {"parts": []}, "finishReason": "SAFETY"}]})
    with pytest.raises(EmptyInferenceResponse):
        extract_text({"candidates": [{"finishReason": "MAX_TOKENS"}]})
