"""
Firebase Admin App

Initializes the firebase-admin SDK once per process. Shared by the
Firestore gateway and the Firebase auth service.

Credentials come from FIREBASE_CREDENTIALS_PATH; without it the SDK falls
back to Application Default Credentials (e.g. on Cloud Run).
"""

import logging

import firebase_admin
from firebase_admin import credentials

from scan2dine.core.config import get_settings

logger = logging.getLogger(__name__)


def get_firebase_app() -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    settings = get_settings()
    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    if settings.firebase_credentials_path:
        cred = credentials.Certificate(settings.firebase_credentials_path)
        logger.info(f"Firebase initialized from {settings.firebase_credentials_path}")
    else:
        cred = credentials.ApplicationDefault()
        logger.info("Firebase initialized with application default credentials")

    return firebase_admin.initialize_app(cred, options or None)
