"""Manual question answering pipeline.

Single pass, no retries:
- auth presence -> input validation -> settings lookup (Firestore) ->
  model resolution -> manual truncation -> Gemini call -> answer formatting.

Every failure is classified once, where it happens, into a
``QueryFailure`` with a fixed caller-visible message; collaborator detail
is logged server-side only. Collaborators are passed in so the gateway can
wire the real Firestore/Gemini clients and tests can pass doubles.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Awaitable, Callable, Optional

from shared.models import (
    AISettings,
    ErrorKind,
    Principal,
    QueryFailure,
    QueryRequest,
    QueryResult,
    QuerySuccess,
)
from shared.tracing import get_logger, log_event, span

from .answer_format import format_answer
from .gemini_client import EmptyInferenceResponse, InferenceError, InferenceRejected
from .model_resolver import DEFAULT_MODEL, resolve_model
from .prompts import SYSTEM_PROMPT, build_user_message, truncate_manual

_log = get_logger("orchestrator")

SettingsLoader = Callable[[], Optional[AISettings]]
# (api_key, model, system_instruction, user_message) -> answer text
Generator = Callable[[str, str, str, str], Awaitable[str]]


def _fail(kind: ErrorKind, reason: str, correlation_id: str) -> QueryFailure:
    log_event(
        "QueryFailed",
        payload={"kind": kind.value, "reason": reason},
        correlation_id=correlation_id,
    )
    return QueryFailure.of(kind)


async def run_query(
    payload: QueryRequest,
    principal: Optional[Principal],
    *,
    load_settings: SettingsLoader,
    generate: Generator,
    default_model: str = DEFAULT_MODEL,
    max_manual_chars: int = 100_000,
) -> QueryResult:
    """Answer ``payload.user_query`` from ``payload.manual_text``.

    Args:
        payload: Manual text and question from the client.
        principal: Authenticated caller, or ``None``.
        load_settings: Blocking settings read; returns ``None`` when the
            settings document does not exist.
        generate: Async inference call returning the raw answer text.
        default_model: Fallback for blank/invalid stored model names.
        max_manual_chars: Manual text beyond this is truncated.

    Returns:
        ``QuerySuccess`` with the formatted answer or ``QueryFailure``.
    """
    correlation_id = str(uuid.uuid4())

    if principal is None:
        return _fail(ErrorKind.UNAUTHENTICATED, "no_principal", correlation_id)

    manual_text = (payload.manual_text or "").strip()
    user_query = (payload.user_query or "").strip()
    if not manual_text or not user_query:
        return _fail(ErrorKind.INVALID_ARGUMENT, "missing_parameters", correlation_id)

    try:
        with span("query.settings", corr=correlation_id):
            settings = await asyncio.to_thread(load_settings)
    except Exception:
        _log.exception("Settings lookup failed (corr=%s)", correlation_id)
        return _fail(ErrorKind.INTERNAL, "settings_read_failed", correlation_id)

    if settings is None:
        _log.error("Settings document missing (corr=%s)", correlation_id)
        return _fail(ErrorKind.FAILED_PRECONDITION, "settings_missing", correlation_id)
    api_key = (settings.api_key or "").strip()
    if not api_key:
        _log.error("Gemini API key is not configured (corr=%s)", correlation_id)
        return _fail(ErrorKind.FAILED_PRECONDITION, "api_key_missing", correlation_id)

    model = resolve_model(settings.model, default=default_model)
    manual = truncate_manual(manual_text, max_manual_chars)
    if len(manual_text) > max_manual_chars:
        _log.info(
            "Manual truncated from %d to %d chars (corr=%s)",
            len(manual_text),
            max_manual_chars,
            correlation_id,
        )

    try:
        with span("query.generate", model=model, corr=correlation_id):
            text = await generate(
                api_key, model, SYSTEM_PROMPT, build_user_message(manual, user_query)
            )
    except InferenceRejected as e:
        _log.error("Gemini rejected model %r (corr=%s): %s", model, correlation_id, e)
        return _fail(ErrorKind.FAILED_PRECONDITION, "model_rejected", correlation_id)
    except EmptyInferenceResponse as e:
        _log.error("Empty response from Gemini (corr=%s): %s", correlation_id, e)
        return _fail(ErrorKind.INTERNAL, "empty_response", correlation_id)
    except InferenceError as e:
        _log.error("Error querying Gemini (corr=%s): %s", correlation_id, e)
        return _fail(ErrorKind.INTERNAL, "inference_failed", correlation_id)
    except Exception:
        _log.exception("Unexpected error querying Gemini (corr=%s)", correlation_id)
        return _fail(ErrorKind.INTERNAL, "inference_failed", correlation_id)

    if not (text or "").strip():
        _log.error("Empty response from Gemini (corr=%s)", correlation_id)
        return _fail(ErrorKind.INTERNAL, "empty_response", correlation_id)

    try:
        answer = format_answer(text)
    except ValueError as e:
        _log.error("Unusable Gemini answer (corr=%s): %s", correlation_id, e)
        return _fail(ErrorKind.INTERNAL, "empty_response", correlation_id)

    log_event(
        "QueryAnswered",
        payload={"model": model, "uid": principal.uid, "detailed": answer.detailed is not None},
        correlation_id=correlation_id,
    )
    return QuerySuccess(answer=answer)
