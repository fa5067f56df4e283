# streamify/services/stream_service.py
# Stream chat integration: user upserts and client tokens

import os
import logging
import requests
from typing import Dict, Optional
from jose import jwt
from streamify.exceptions import StreamConfigurationError
from streamify.utils.validators import is_data_uri

logger = logging.getLogger(__name__)

STREAM_API_KEY = os.getenv("STREAM_API_KEY")
STREAM_API_SECRET = os.getenv("STREAM_API_SECRET")
STREAM_BASE_URL = os.getenv("STREAM_BASE_URL", "https://chat.stream-io-api.com")
STREAM_TIMEOUT = 10

if not STREAM_API_KEY or not STREAM_API_SECRET:
    logger.warning("Stream API key or secret is missing. Chat features will not work.")


def _require_config():
    if not STREAM_API_KEY or not STREAM_API_SECRET:
        raise StreamConfigurationError("Stream API key or secret is missing")


def _server_token() -> str:
    return jwt.encode({"server": True}, STREAM_API_SECRET, algorithm="HS256")


def generate_stream_token(user_id) -> str:
    """Issue a Stream client token for a user."""
    _require_config()
    return jwt.encode({"user_id": str(user_id)}, STREAM_API_SECRET, algorithm="HS256")


def stream_user_payload(user: dict) -> Dict:
    """Map a local user document to a Stream user record."""
    payload = {
        "id": str(user["_id"]),
        "name": user.get("full_name", ""),
    }
    # Inline uploads are too large for Stream user records
    profile_pic = user.get("profile_pic")
    if profile_pic and not is_data_uri(profile_pic):
        payload["image"] = profile_pic
    return payload


def upsert_stream_user(user_data: Dict) -> Dict:
    """Create or update a user on Stream."""
    _require_config()
    response = requests.post(
        f"{STREAM_BASE_URL}/users",
        params={"api_key": STREAM_API_KEY},
        json={"users": {user_data["id"]: user_data}},
        headers={
            "Authorization": _server_token(),
            "Stream-Auth-Type": "jwt",
        },
        timeout=STREAM_TIMEOUT,
    )
    response.raise_for_status()
    logger.info(f"Upserted Stream user {user_data['id']}")
    return user_data


def sync_stream_user(user: dict) -> Optional[Dict]:
    """Upsert a user on Stream, logging instead of raising on failure."""
    try:
        return upsert_stream_user(stream_user_payload(user))
    except StreamConfigurationError as e:
        logger.warning(f"Skipping Stream upsert for {user.get('_id')}: {e}")
    except requests.exceptions.RequestException as e:
        logger.error(f"Error upserting Stream user {user.get('_id')}: {e}")
    return None


def upsert_all_stream_users(db) -> int:
    """Upsert every stored user on Stream and return how many succeeded."""
    _require_config()
    count = 0
    for user in db.users.find({}, {"full_name": 1, "profile_pic": 1}):
        upsert_stream_user(stream_user_payload(user))
        logger.info(f"Upserted user: {user.get('full_name')}")
        count += 1
    return count
