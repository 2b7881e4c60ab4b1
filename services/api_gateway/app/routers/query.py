"""Manual question answering router.

Accepts the Firebase callable request shape ``{"data": {"manualText",
"userQuery"}}`` (a bare object is accepted too) and replies with
``{"result": {"short", "detailed"?}}`` or
``{"error": {"status", "message"}}`` using callable-protocol HTTP codes.

Collaborators are module-level callables so they can be patched in tests.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse

from services.llm_generate.app.gemini_client import GeminiClient
from services.llm_generate.app.orchestrator import run_query
from shared.auth import resolve_principal
from shared.models import AISettings, QueryFailure, QueryRequest
from shared.settings import Settings
from shared.settings_store import FirestoreSettingsStore

_settings = Settings()

router = APIRouter()


def load_ai_settings() -> Optional[AISettings]:
    return FirestoreSettingsStore().load()


async def gemini_generate(
    api_key: str, model: str, system_instruction: str, user_message: str
) -> str:
    return await GeminiClient().generate(api_key, model, system_instruction, user_message)


def _unwrap(body: Any) -> QueryRequest:
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        body = body["data"]
    if not isinstance(body, dict):
        return QueryRequest()
    fields = {
        k: v for k, v in body.items() if k in ("manualText", "userQuery") and isinstance(v, str)
    }
    return QueryRequest(**fields)


@router.post("/queryGemini")
async def query_gemini(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> JSONResponse:
    """Answer a question about the supplied manual text."""
    # Token verification does blocking network I/O (certs, revocation check)
    principal = await asyncio.to_thread(
        resolve_principal,
        authorization,
        request.cookies.get(_settings.session_cookie_name),
    )
    try:
        body: Any = await request.json()
    except ValueError:
        # Malformed JSON is reported like a missing field
        body = None
    result = await run_query(
        _unwrap(body),
        principal,
        load_settings=load_ai_settings,
        generate=gemini_generate,
        default_model=_settings.gemini_default_model,
        max_manual_chars=_settings.manual_max_chars,
    )
    if isinstance(result, QueryFailure):
        return JSONResponse(
            status_code=result.kind.http_status,
            content={
                "error": {"status": result.kind.wire_status, "message": result.message}
            },
        )
    return JSONResponse(status_code=200, content={"result": result.answer.to_wire()})
