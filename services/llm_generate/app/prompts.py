"""
Prompt templates for manual question answering.

The system prompt fixes the output protocol the answer formatter relies on:
a one-sentence answer, the ``***`` separator, then a detailed explanation.
"""

from __future__ import annotations

from .answer_format import SEPARATOR

NOT_FOUND_ANSWER = "I could not find the answer in the provided manual."

MANUAL_TRUNCATION_MARKER = "\n\n[... manual truncated ...]"

# ============================  MANUAL ANSWERING  =========================== #

SYSTEM_PROMPT = (
    "ROLE: You are an expert assistant for technical manuals. Answer the user's "
    "question based *only* on the provided manual text.\n\n"
    "FORMAT:\n"
    "1) First, give a single, concise sentence answer.\n"
    f"2) Then, add the separator '{SEPARATOR}'.\n"
    "3) After the separator, provide a detailed explanation that cites the relevant "
    "   steps, settings, warnings or section names from the manual.\n\n"
    "RULES:\n"
    "• Do not use knowledge outside the manual text.\n"
    "• Answer in the language of the question.\n"
    f'• If the answer isn\'t in the manual, respond with only: "{NOT_FOUND_ANSWER}"\n'
)


def truncate_manual(manual_text: str, max_chars: int) -> str:
    """Cut ``manual_text`` to ``max_chars`` characters, marking the cut."""
    if len(manual_text) <= max_chars:
        return manual_text
    return manual_text[:max_chars] + MANUAL_TRUNCATION_MARKER


def build_user_message(manual_text: str, user_query: str) -> str:
    return f"MANUAL TEXT:\n---\n{manual_text}\n---\n\nQUESTION: {user_query}"
