"""Tracing utilities with optional Langfuse integration.

By default this module provides a lightweight span context manager that
records nothing (no-op). If `LANGFUSE_ENABLED=true` and the `langfuse`
Python SDK is installed and configured via environment variables, spans
are forwarded to Langfuse. Errors in tracing never affect request
handling; we fail-soft to a no-op.

This module also exposes helpers for structured observability events
(`log_event`), per-module loggers (`get_logger`) and crude token
estimation (`estimate_tokens`).
"""

import contextvars
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from shared.settings import Settings

_settings = Settings()

try:
    from langfuse import Langfuse  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    Langfuse = None  # type: ignore

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the service namespace."""
    return logging.getLogger(f"manual_assistant.{name}")


_log = get_logger("tracing")


def _now_ms() -> int:
    return int(time.time() * 1000)


class _Span:
    """A no‑op span used when tracing is disabled."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        self.name = name

    def __enter__(self) -> "_Span":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


_current_trace = contextvars.ContextVar("manual_assistant.current_trace", default=None)


class Tracer:
    """Tracer facade with pluggable backends (no-op or Langfuse)."""

    def __init__(self) -> None:
        self._backend = _settings.tracing_backend.lower()
        self._enabled = bool(_settings.langfuse_enabled)

        self._client = None
        if self._enabled and self._backend == "langfuse" and Langfuse is not None:
            try:
                if _settings.langfuse_public_key and _settings.langfuse_secret_key:
                    self._client = Langfuse(
                        public_key=_settings.langfuse_public_key,
                        secret_key=_settings.langfuse_secret_key,
                        host=_settings.langfuse_host or None,
                    )
            except Exception as e:
                _log.warning("Langfuse unavailable, tracing disabled: %s", e)
                self._client = None

    def start_trace(
        self, name: str, input: Optional[dict] = None, user_id: Optional[str] = None
    ):
        if self._client is None:
            return None
        try:
            tr = self._client.trace(name=name, input=input or {}, user_id=user_id)
            _current_trace.set(tr)
            return tr
        except Exception:
            return None

    def end_trace(self, output: Optional[dict] = None) -> None:
        tr = _current_trace.get()
        if tr is not None and hasattr(tr, "update"):
            try:
                tr.update(output=output or {})
            except Exception:
                pass
        _current_trace.set(None)

    def start_span(self, name: str, **kwargs: Any) -> _Span:
        if self._client is None:
            return _Span(name, **kwargs)
        return _LangfuseSpan(self._client, name, parent_trace=_current_trace.get(), **kwargs)


tracer = Tracer()


def install_fastapi_tracing(app, service_name: str = "api-gateway") -> None:
    """Install middleware to create one trace per HTTP request."""
    from fastapi import Request

    @app.middleware("http")
    async def _trace_middleware(request: Request, call_next: Callable):
        # Method and path only; bodies carry manual text and credentials
        tracer.start_trace(
            name=f"{service_name} {request.method} {request.url.path}",
            input={"method": request.method, "path": request.url.path},
        )
        status = None
        try:
            with span("http.request"):
                response = await call_next(request)
            status = response.status_code
            return response
        finally:
            tracer.end_trace(output={"status": status})


@contextmanager
def span(name: str, **kwargs: Any) -> Iterator[_Span]:
    """Context manager wrapper around the tracer's start_span method.

    Usage:
        with span("gemini.generate", model=model):
            ...
    """
    s = tracer.start_span(name, **kwargs)
    s.__enter__()
    try:
        yield s
    except BaseException as exc:
        s.__exit__(type(exc), exc, exc.__traceback__)
        raise
    else:
        s.__exit__(None, None, None)


class _LangfuseSpan(_Span):  # pragma: no cover - optional dependency
    def __init__(
        self, client: Any, name: str, parent_trace: Any | None = None, **kwargs: Any
    ) -> None:
        super().__init__(name, **kwargs)
        self._client = client
        self._trace = parent_trace
        self._span = None
        self._start_ms = _now_ms()
        self._kwargs = kwargs

    def __enter__(self) -> "_LangfuseSpan":
        try:
            if self._trace is None and hasattr(self._client, "trace"):
                self._trace = self._client.trace(name=_settings.trace_name)
            if self._trace is not None and hasattr(self._trace, "span"):
                self._span = self._trace.span(name=self.name, input=self._kwargs)
        except Exception:
            self._trace = None
            self._span = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._span is not None and hasattr(self._span, "end"):
                self._span.end(
                    output={
                        "error": str(exc) if exc else None,
                        "duration_ms": max(1, _now_ms() - self._start_ms),
                    }
                )
        except Exception:
            pass


def log_event(
    name: str, payload: Optional[dict] = None, correlation_id: Optional[str] = None
) -> None:
    """Emit a short-lived structured event span and a debug log line.

    Args:
        name: Logical event name, e.g. "ModelResolved", "Generation", "QueryFailed".
        payload: JSON-serializable dict with event data. Never put secrets here.
        correlation_id: Optional ID to stitch events for one request.
    """
    meta = dict(payload or {})
    if correlation_id:
        meta["correlation_id"] = correlation_id
    _log.debug("event %s %s", name, meta)
    with span(f"event.{name}", **meta):
        pass


def estimate_tokens(text: str) -> int:
    """Very rough subword token estimate (for logging only)."""
    if not text:
        return 0
    # Approximate: 1 token ~= 4 chars for English-like text
    return max(1, int(len(text) / 4))
