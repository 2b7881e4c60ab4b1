"""Known Gemini model identifiers.

Kept free of imports so settings validation and the resolver can both
depend on it.
"""

from types import MappingProxyType
from typing import Mapping

DEFAULT_MODEL = "gemini-2.5-flash"
MODEL_PREFIX = "gemini-"

# Retired/preview identifiers -> current canonical replacement.
# No value may itself be a key, so resolution is idempotent.
MODEL_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "gemini-pro": "gemini-2.5-flash",
        "gemini-1.0-pro": "gemini-2.5-flash",
        "gemini-1.5-flash": "gemini-2.5-flash",
        "gemini-1.5-flash-latest": "gemini-2.5-flash",
        "gemini-1.5-flash-preview-0514": "gemini-2.5-flash",
        "gemini-1.5-flash-8b": "gemini-2.5-flash-lite",
        "gemini-1.5-pro": "gemini-2.5-pro",
        "gemini-1.5-pro-latest": "gemini-2.5-pro",
        "gemini-1.5-pro-preview-0514": "gemini-2.5-pro",
        "gemini-2.0-flash-exp": "gemini-2.0-flash",
        "gemini-2.5-flash-preview-04-17": "gemini-2.5-flash",
        "gemini-2.5-flash-preview-05-20": "gemini-2.5-flash",
        "gemini-2.5-pro-preview-05-06": "gemini-2.5-pro",
        "gemini-2.5-pro-preview-06-05": "gemini-2.5-pro",
    }
)
