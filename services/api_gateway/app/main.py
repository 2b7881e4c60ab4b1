"""API gateway for the manual assistant.

This service is the only HTTP surface the client application talks to:

- POST `/queryGemini`: answer a question about a manual (Firebase callable
  wire format: ``{"data": ...}`` in, ``{"result": ...}`` or ``{"error": ...}``
  out).
- POST `/sessionLogin` / `/sessionLogout`: mint and clear the HTTP-only
  session cookie.

Authentication, settings and inference are delegated to Firebase Auth,
Firestore and Gemini respectively; the gateway holds no state.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.models import ERROR_MESSAGES, ErrorKind
from shared.settings import Settings
from shared.tracing import get_logger, install_fastapi_tracing

from .routers import query, session

_log = get_logger("api_gateway")

app = FastAPI(title="Manual Assistant API", version="0.3.0")
install_fastapi_tracing(app, service_name="api-gateway")


# ---------- Global safety net: never leak internals ----------
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for any unhandled exception; return structured JSON 500."""
    _log.exception("Unhandled error on %s %s", request.method, request.url.path)
    kind = ErrorKind.INTERNAL
    return JSONResponse(
        status_code=kind.http_status,
        content={"error": {"status": kind.wire_status, "message": ERROR_MESSAGES[kind]}},
    )


# -------------------------------------------------------------


@app.get("/")
def _root():
    return {"status": "ok", "service": "api-gateway"}


@app.get("/health")
def _health():
    return {"status": "ok"}


# -------- CORS (client application origins) --------
s = Settings()
origins = s.cors_origins() or ["http://localhost:5000", "http://localhost:5173"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)
# ---------------------------------------------------


app.include_router(query.router, prefix="", tags=["query"])
app.include_router(session.router, prefix="", tags=["session"])
