from __future__ import annotations
from functools import lru_cache
from pathlib import Path
from typing import Optional

from datastore.firebase_store import FirebaseSnapshotStore, initialize_firebase_app
from datastore.mock_store import MockSnapshotStore
from datastore.snapshot_store import SnapshotStore
from settings import MOCK_BACKEND, get_settings, validate_settings


@lru_cache
def build_default_store(backend: Optional[str] = None) -> SnapshotStore:
    """Build the store selected by settings; raises ConfigInvalid when incomplete."""
    settings = get_settings()
    selected = settings.store_backend if backend is None else backend
    if selected == MOCK_BACKEND:
        path = Path(settings.mock_store_path) if settings.mock_store_path else None
        return MockSnapshotStore(persistence_path=path)

    validate_settings(settings, selected)
    return FirebaseSnapshotStore(initialize_firebase_app(settings))
