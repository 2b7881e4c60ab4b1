"""Model-name resolution for Gemini calls.

The model identifier comes from an operator-edited settings document, so it
may be blank, a retired preview name, or plain garbage. A bad value must
never fail the user's request: it degrades to ``DEFAULT_MODEL`` and leaves a
warning in the server log instead.
"""

from __future__ import annotations

from typing import Mapping, Optional

from shared.model_catalog import DEFAULT_MODEL, MODEL_ALIASES, MODEL_PREFIX
from shared.tracing import get_logger, log_event

_log = get_logger("model_resolver")

__all__ = ["DEFAULT_MODEL", "MODEL_ALIASES", "MODEL_PREFIX", "resolve_model"]


def resolve_model(
    raw: Optional[str],
    *,
    default: str = DEFAULT_MODEL,
    aliases: Mapping[str, str] = MODEL_ALIASES,
) -> str:
    """Map a stored model name to one that can be sent to Gemini.

    Args:
        raw: Model name from the settings document; may be ``None`` or blank.
        default: Fallback for blank or invalid names.
        aliases: Deprecated name -> canonical name.

    Returns:
        ``default`` for blank/invalid input, the canonical name for a known
        alias, otherwise the trimmed input unchanged.
    """
    name = (raw or "").strip()
    if not name:
        return default

    if name in aliases:
        canonical = aliases[name]
        _log.warning("Deprecated model alias %r used; resolved to %r", name, canonical)
        log_event("ModelResolved", payload={"requested": name, "model": canonical, "reason": "alias"})
        return canonical

    if not name.startswith(MODEL_PREFIX):
        _log.warning("Invalid model name %r; falling back to %r", name, default)
        log_event("ModelResolved", payload={"requested": name, "model": default, "reason": "invalid"})
        return default

    return name
