"""Lazy Firebase Admin initialisation.

The default app is created on first use so that importing the gateway (and
running the test-suite) never needs Google credentials. On Cloud Run /
Cloud Functions the ambient service account is picked up automatically.
"""

from __future__ import annotations

import threading

import firebase_admin

from shared.settings import Settings

_lock = threading.Lock()


def get_app() -> firebase_admin.App:
    """Return the default Firebase app, initialising it once per process."""
    with _lock:
        try:
            return firebase_admin.get_app()
        except ValueError:
            project_id = Settings().firebase_project_id
            options = {"projectId": project_id} if project_id else None
            return firebase_admin.initialize_app(options=options)
