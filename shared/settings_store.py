"""Firestore-backed settings collaborator.

The Gemini API key and preferred model are stored in a single document so
operators can rotate them from the console. The document is read on every
request (no caching), trading one round-trip for immediate consistency.
"""

from __future__ import annotations

from typing import Any, Optional

from firebase_admin import firestore

from shared.firebase import get_app
from shared.models import AISettings
from shared.settings import Settings
from shared.tracing import get_logger, span

_log = get_logger("settings_store")


class FirestoreSettingsStore:
    """Reads ``{collection}/{document}`` and returns :class:`AISettings`."""

    def __init__(
        self,
        collection: Optional[str] = None,
        document: Optional[str] = None,
        client: Any = None,
    ) -> None:
        s = Settings()
        self.collection = collection or s.settings_collection
        self.document = document or s.settings_document
        self._client = client

    def _db(self) -> Any:
        if self._client is None:
            self._client = firestore.client(app=get_app())
        return self._client

    def load(self) -> Optional[AISettings]:
        """Return the stored settings, or ``None`` if the document is missing.

        Firestore errors propagate to the caller unchanged.
        """
        with span("settings.load", path=f"{self.collection}/{self.document}"):
            snap = self._db().collection(self.collection).document(self.document).get()
        if not snap.exists:
            _log.error(
                "Settings document %s/%s does not exist", self.collection, self.document
            )
            return None
        data = snap.to_dict() or {}
        api_key = data.get("apiKey")
        model = data.get("model")
        return AISettings(
            api_key=api_key.strip() if isinstance(api_key, str) else "",
            model=model if isinstance(model, str) else None,
        )
