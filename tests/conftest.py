import os

# Deterministic, offline-friendly tests: no tracing backend, no real project
os.environ.setdefault("LANGFUSE_ENABLED", "0")
os.environ.setdefault("FIREBASE_PROJECT_ID", "demo-manual-assistant")
os.environ.setdefault("FIREBASE_WEB_API_KEY", "test-web-api-key")
os.environ.setdefault("GEMINI_API_BASE", "https://gemini.test/v1beta")
os.environ.pop("GEMINI_MODEL", None)
os.environ.pop("GEMINI_DEFAULT_MODEL", None)
