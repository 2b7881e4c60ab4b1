"""Split raw model output into the short/detailed pair the client renders.

The system prompt asks Gemini to write a one-sentence answer, then the
separator ``***``, then an explanation. Output without the separator is
tolerated and returned as a short answer only.
"""

from __future__ import annotations

from shared.models import FormattedAnswer

SEPARATOR = "***"
LINE_BREAK = "<br>"


def _normalize(segment: str) -> str:
    return segment.strip().replace("\n", LINE_BREAK)


def format_answer(raw_text: str) -> FormattedAnswer:
    """Return the formatted answer for non-blank ``raw_text``.

    Raises:
        ValueError: if ``raw_text`` is blank; callers report that as an
            empty inference response before getting here.
    """
    text = raw_text or ""
    if not text.strip():
        raise ValueError("cannot format an empty answer")

    head, sep, tail = text.partition(SEPARATOR)
    short = _normalize(head)
    detailed = _normalize(tail) if sep else ""

    if not short:
        # Separator came first; promote the explanation
        short, detailed = detailed, ""
    if not short:
        raise ValueError("answer contains only the separator")

    return FormattedAnswer(short=short, detailed=detailed or None)
