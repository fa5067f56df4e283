# streamify/services/user_service.py
# User accounts, onboarding and the friend graph

import logging
import random
from typing import Dict, List, Optional
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from streamify.exceptions import DuplicateEmailError, FriendRequestError, UserNotFoundError
from streamify.models.friend_request import (
    FriendRequestResponse,
    FriendRequestsResponse,
    FriendRequestStatus,
)
from streamify.models.user import PublicUserResponse, UserResponse
from streamify.utils.auth import get_password_hash
from streamify.utils.db_setup import get_database_connection, utcnow
from streamify.utils.validators import validate_object_id

logger = logging.getLogger(__name__)

AVATAR_URL = "https://avatar.iran.liara.run/public/{}.png"
PUBLIC_PROFILE_FIELDS = {"full_name": 1, "profile_pic": 1, "bio": 1, "location": 1}
ONBOARDING_FIELDS = ("full_name", "bio", "location", "profile_pic")


def random_avatar() -> str:
    return AVATAR_URL.format(random.randint(1, 100))


def serialize_user(user: dict) -> UserResponse:
    return UserResponse(
        id=str(user["_id"]),
        email=user["email"],
        full_name=user.get("full_name", ""),
        bio=user.get("bio") or "",
        profile_pic=user.get("profile_pic") or "",
        location=user.get("location") or "",
        is_onboarded=user.get("is_onboarded", False),
        friends=[str(friend_id) for friend_id in user.get("friends", [])],
        created_at=user.get("created_at"),
        updated_at=user.get("updated_at"),
    )


def serialize_public_user(user: dict) -> PublicUserResponse:
    return PublicUserResponse(
        id=str(user["_id"]),
        full_name=user.get("full_name", ""),
        bio=user.get("bio") or "",
        profile_pic=user.get("profile_pic") or "",
        location=user.get("location") or "",
    )


def serialize_friend_request(request: dict, profiles: Optional[Dict[ObjectId, dict]] = None) -> FriendRequestResponse:
    """Serialize a request, replacing user ids with profiles when given."""
    profiles = profiles or {}

    def side(user_id):
        profile = profiles.get(user_id)
        return serialize_public_user(profile) if profile else str(user_id)

    return FriendRequestResponse(
        id=str(request["_id"]),
        sender=side(request["sender"]),
        recipient=side(request["recipient"]),
        status=request.get("status", FriendRequestStatus.PENDING.value),
        created_at=request.get("created_at"),
        updated_at=request.get("updated_at"),
    )


def get_user_by_email(email: str) -> Optional[dict]:
    """Get user from database by email."""
    db = get_database_connection()
    return db.users.find_one({"email": email})


def get_user_by_id(user_id) -> Optional[dict]:
    """Get user from database by id, or None for unknown or malformed ids."""
    if isinstance(user_id, str):
        if not validate_object_id(user_id):
            return None
        user_id = ObjectId(user_id)
    db = get_database_connection()
    return db.users.find_one({"_id": user_id})


def create_user(email: str, password: str, full_name: str) -> dict:
    """Create a new user with a hashed password and a random avatar."""
    db = get_database_connection()
    if db.users.find_one({"email": email}):
        logger.warning(f"Attempted to create duplicate user with email: {email}")
        raise DuplicateEmailError()

    now = utcnow()
    user = {
        "email": email,
        "password": get_password_hash(password),
        "full_name": full_name,
        "bio": "",
        "profile_pic": random_avatar(),
        "location": "",
        "is_onboarded": False,
        "friends": [],
        "reset_password_otp": None,
        "reset_password_expiry": None,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = db.users.insert_one(user)
    except DuplicateKeyError:
        logger.warning(f"Duplicate key on user insert: {email}")
        raise DuplicateEmailError()

    user["_id"] = result.inserted_id
    logger.info(f"Created new user with ID: {result.inserted_id}")
    return user


def onboard_user(user_id: ObjectId, profile: Dict) -> Optional[dict]:
    """Store the onboarding profile and flag the user as onboarded."""
    db = get_database_connection()
    updates = {key: profile[key] for key in ONBOARDING_FIELDS if profile.get(key) is not None}
    updates["is_onboarded"] = True
    updates["updated_at"] = utcnow()

    user = db.users.find_one_and_update(
        {"_id": user_id},
        {"$set": updates},
        projection={"password": 0},
        return_document=ReturnDocument.AFTER,
    )
    if user:
        logger.info(f"User onboarded: {user_id}")
    return user


def get_recommended_users(current_user: dict) -> List[PublicUserResponse]:
    """Onboarded users who are neither the caller nor already friends."""
    db = get_database_connection()
    excluded = [current_user["_id"]] + list(current_user.get("friends", []))
    users = db.users.find(
        {"_id": {"$nin": excluded}, "is_onboarded": True},
        PUBLIC_PROFILE_FIELDS,
    )
    return [serialize_public_user(user) for user in users]


def get_friends(current_user: dict) -> List[PublicUserResponse]:
    db = get_database_connection()
    friend_ids = list(current_user.get("friends", []))
    if not friend_ids:
        return []
    friends = db.users.find({"_id": {"$in": friend_ids}}, PUBLIC_PROFILE_FIELDS)
    return [serialize_public_user(friend) for friend in friends]


def send_friend_request(current_user: dict, recipient_id: str) -> FriendRequestResponse:
    """Create a pending request from the caller to recipient_id."""
    sender_id = current_user["_id"]

    if recipient_id == str(sender_id):
        raise FriendRequestError("You can't send friend request to yourself")

    if not validate_object_id(recipient_id):
        raise FriendRequestError("Invalid user id")

    recipient = get_user_by_id(recipient_id)
    if not recipient:
        raise UserNotFoundError("Recipient not found")

    if sender_id in recipient.get("friends", []):
        raise FriendRequestError("You are already friends with this user")

    db = get_database_connection()
    existing = db.friend_requests.find_one({
        "$or": [
            {"sender": sender_id, "recipient": recipient["_id"]},
            {"sender": recipient["_id"], "recipient": sender_id},
        ]
    })
    if existing:
        raise FriendRequestError("A friend request already exists between you and this user")

    now = utcnow()
    request = {
        "sender": sender_id,
        "recipient": recipient["_id"],
        "status": FriendRequestStatus.PENDING.value,
        "created_at": now,
        "updated_at": now,
    }
    result = db.friend_requests.insert_one(request)
    request["_id"] = result.inserted_id
    logger.info(f"Friend request {result.inserted_id} sent from {sender_id} to {recipient_id}")
    return serialize_friend_request(request)


def accept_friend_request(current_user: dict, request_id: str) -> FriendRequestResponse:
    """Accept a pending request addressed to the caller and link both users."""
    if not validate_object_id(request_id):
        raise UserNotFoundError("Friend request not found")

    db = get_database_connection()
    request = db.friend_requests.find_one({"_id": ObjectId(request_id)})
    if not request:
        raise UserNotFoundError("Friend request not found")

    if request["recipient"] != current_user["_id"]:
        raise FriendRequestError(
            "You are not authorized to accept this request", status_code=403
        )

    if request.get("status") == FriendRequestStatus.ACCEPTED.value:
        raise FriendRequestError("Friend request already accepted")

    now = utcnow()
    db.friend_requests.update_one(
        {"_id": request["_id"]},
        {"$set": {"status": FriendRequestStatus.ACCEPTED.value, "updated_at": now}},
    )
    db.users.update_one(
        {"_id": request["sender"]},
        {"$addToSet": {"friends": request["recipient"]}, "$set": {"updated_at": now}},
    )
    db.users.update_one(
        {"_id": request["recipient"]},
        {"$addToSet": {"friends": request["sender"]}, "$set": {"updated_at": now}},
    )
    request["status"] = FriendRequestStatus.ACCEPTED.value
    request["updated_at"] = now
    logger.info(f"Friend request {request_id} accepted by {current_user['_id']}")
    return serialize_friend_request(request)


def _load_profiles(db, user_ids) -> Dict[ObjectId, dict]:
    ids = list(set(user_ids))
    if not ids:
        return {}
    return {user["_id"]: user for user in db.users.find({"_id": {"$in": ids}}, PUBLIC_PROFILE_FIELDS)}


def get_friend_requests(current_user: dict) -> FriendRequestsResponse:
    """Pending requests to the caller and accepted requests the caller sent."""
    db = get_database_connection()
    incoming = list(db.friend_requests.find({
        "recipient": current_user["_id"],
        "status": FriendRequestStatus.PENDING.value,
    }))
    accepted = list(db.friend_requests.find({
        "sender": current_user["_id"],
        "status": FriendRequestStatus.ACCEPTED.value,
    }))

    profiles = _load_profiles(
        db,
        [request["sender"] for request in incoming] + [request["recipient"] for request in accepted],
    )
    return FriendRequestsResponse(
        incoming_reqs=[serialize_friend_request(request, profiles) for request in incoming],
        accepted_reqs=[serialize_friend_request(request, profiles) for request in accepted],
    )


def get_outgoing_friend_requests(current_user: dict) -> List[FriendRequestResponse]:
    db = get_database_connection()
    outgoing = list(db.friend_requests.find({
        "sender": current_user["_id"],
        "status": FriendRequestStatus.PENDING.value,
    }))
    profiles = _load_profiles(db, [request["recipient"] for request in outgoing])
    return [serialize_friend_request(request, profiles) for request in outgoing]
