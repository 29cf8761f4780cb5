"""Firebase Admin SDK initialization (shared by the API and the job writer)."""

import json
import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)


def _get_firebase_credentials():
    """Parse SERVICE_FILE_LOC as a JSON string or file path."""
    cert_value = os.environ.get("SERVICE_FILE_LOC", "")
    if cert_value.strip().startswith("{"):
        return credentials.Certificate(json.loads(cert_value))
    return credentials.Certificate(cert_value)


def _initialize_firebase():
    """Initialize the Firebase Admin SDK (idempotent). Returns a Firestore client.

    With FIRESTORE_EMULATOR_HOST set the client talks to the local emulator and
    no credentials are loaded.
    """
    if firebase_admin._apps:
        return firestore.client()

    cert_value = os.environ.get("SERVICE_FILE_LOC", "")
    if os.environ.get("FIRESTORE_EMULATOR_HOST"):
        project_id = os.environ.get("GCP_PROJECT_ID", "demo-document-jobs")
        firebase_admin.initialize_app(options={"projectId": project_id})
        logger.info("Firebase initialized against emulator %s", os.environ["FIRESTORE_EMULATOR_HOST"])
    elif cert_value:
        firebase_admin.initialize_app(_get_firebase_credentials())
        logger.info("Firebase initialized with explicit credentials")
    else:
        firebase_admin.initialize_app()
        logger.info("Firebase initialized with default credentials")

    return firestore.client()
