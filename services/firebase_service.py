import firebase_admin
from firebase_admin import credentials, db
import json
import logging
from typing import List

from core.config import settings

logger = logging.getLogger(__name__)

def initialize_firebase():
    """Initializes the Firebase Admin SDK used to store saved packing lists and itineraries."""
    try:
        firebase_admin.get_app()
        return
    except ValueError:
        pass

    if not settings.FIREBASE_SERVICE_ACCOUNT_KEY_JSON:
        logger.warning("FIREBASE_SERVICE_ACCOUNT_KEY_JSON is not set; saved packing lists and itineraries are unavailable.")
        return
    try:
        # The service account key is expected to be a JSON string in the environment variable.
        service_account_info = json.loads(settings.FIREBASE_SERVICE_ACCOUNT_KEY_JSON)

        cred = credentials.Certificate(service_account_info)

        firebase_admin.initialize_app(cred, {
            'databaseURL': settings.FIREBASE_DATABASE_URL
        })
        logger.info("Firebase initialized successfully.")
    except (ValueError, TypeError) as e:
        # Generation keeps working; only the save/load endpoints depend on Firebase.
        logger.error("Error initializing Firebase: %s", e)

def next_sequential_id(counter_path: str) -> str:
    """Allocates the next sequential ID ("1", "2", ...) from a counter node."""
    new_value = db.reference(counter_path).transaction(lambda current: (current or 0) + 1)
    return str(new_value)

def snapshot_records(data) -> List[dict]:
    """Returns the child records of a collection snapshot."""
    if not data:
        return []
    # The Realtime Database returns integer-like keys as a sparse array
    records = data.values() if isinstance(data, dict) else data
    return [record for record in records if record]
