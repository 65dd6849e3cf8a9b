from __future__ import annotations
import base64
import json
import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials, db

from settings import Settings

logger = logging.getLogger(__name__)

APP_NAME = "telemetry-gateway"


def _build_credential(settings: Settings) -> credentials.Base:
    if settings.firebase_key_base64:
        cred_dict = json.loads(
            base64.b64decode(settings.firebase_key_base64).decode("utf-8")
        )
        return credentials.Certificate(cred_dict)
    if settings.firebase_credentials_path:
        return credentials.Certificate(settings.firebase_credentials_path)
    return credentials.ApplicationDefault()


def _build_options(settings: Settings) -> Dict[str, Any]:
    options: Dict[str, Any] = {"databaseURL": settings.firebase_database_url}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket
    return options


def initialize_firebase_app(settings: Settings, name: str = APP_NAME) -> firebase_admin.App:
    """Return the named firebase_admin app, initializing it on first use."""
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        pass

    app = firebase_admin.initialize_app(
        _build_credential(settings),
        _build_options(settings),
        name=name,
    )
    logger.info(
        "Firebase app initialized",
        extra={"project_id": settings.firebase_project_id},
    )
    return app


class FirebaseSnapshotStore:

    def __init__(self, app: firebase_admin.App) -> None:
        self.app = app

    def fetch(self, path: str) -> Optional[Any]:
        return db.reference(path, app=self.app).get()
