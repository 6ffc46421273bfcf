"""
Firebase Admin bootstrap and Firestore collection addressing.

All dashboard collections live under a per-deployment namespace:
``artifacts/<app_id>/public/data/<collection>``.
"""
import json
import logging

import firebase_admin
from firebase_admin import credentials, firestore

from sales_dashboard.common.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Firebase collections
TRANSACTIONS_COLLECTION = "transactions"
RETURNS_COLLECTION = "returns"
HISTORY_COLLECTION = "history"
SETTINGS_COLLECTION = "settings"


def load_credentials(settings: Settings):
    """
    Load service account credentials.

    Priority: FIREBASE_CREDENTIALS_JSON_CONTENT env var (for production),
    fallback: local JSON file (for local development).
    """
    if settings.firebase_credentials_json:
        try:
            cred_dict = json.loads(settings.firebase_credentials_json)
        except json.JSONDecodeError as e:
            logger.critical("FIREBASE_CREDENTIALS_JSON_CONTENT is set but contains invalid JSON: %s", e)
            raise
        cred = credentials.Certificate(cred_dict)
        logger.info("Initialized Firebase from FIREBASE_CREDENTIALS_JSON_CONTENT env var.")
        return cred

    try:
        cred = credentials.Certificate(settings.firebase_credentials_file)
    except FileNotFoundError:
        logger.critical(
            "Local credentials file '%s' not found. It is required when "
            "FIREBASE_CREDENTIALS_JSON_CONTENT is not set.",
            settings.firebase_credentials_file
        )
        raise
    logger.info("Initialized Firebase from local JSON file: %s", settings.firebase_credentials_file)
    return cred


def init_firebase(settings: Settings = None) -> firebase_admin.App:
    """Initialize the default Firebase app once; later calls return the existing app."""
    settings = settings or get_settings()
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {}
    if settings.firebase_project_id:
        options['projectId'] = settings.firebase_project_id
    return firebase_admin.initialize_app(load_credentials(settings), options or None)


def get_firestore_client():
    """Get Firestore client instance."""
    return firestore.client()


def collection_path(name: str, app_id: str = None) -> str:
    """
    Build the full path of a namespaced collection.

    Args:
        name: Collection name, e.g. ``transactions``
        app_id: Namespace identifier; defaults to the configured APP_ID

    Returns:
        str: Path usable with ``client.collection(...)``
    """
    app_id = app_id or get_settings().app_id
    return f"artifacts/{app_id}/public/data/{name}"
