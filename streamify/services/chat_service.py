# streamify/services/chat_service.py
# Direct messages and unseen message counters

import logging
from typing import Dict
from streamify.models.message import MessageResponse
from streamify.utils.db_setup import get_database_connection, utcnow

logger = logging.getLogger(__name__)


def serialize_message(message: dict) -> MessageResponse:
    return MessageResponse(
        id=str(message["_id"]),
        sender_id=message["sender_id"],
        receiver_id=message["receiver_id"],
        message=message["message"],
        is_read=message.get("is_read", False),
        created_at=message.get("created_at"),
    )


def send_message(sender_id: str, receiver_id: str, body: str) -> MessageResponse:
    """Store a new unread message."""
    db = get_database_connection()
    message = {
        "sender_id": str(sender_id),
        "receiver_id": str(receiver_id),
        "message": body,
        "is_read": False,
        "created_at": utcnow(),
    }
    result = db.messages.insert_one(message)
    message["_id"] = result.inserted_id
    logger.info(f"Message {result.inserted_id} stored from {sender_id} to {receiver_id}")
    return serialize_message(message)


def count_unseen_messages(user_id: str) -> int:
    """Count unread messages addressed to user_id."""
    db = get_database_connection()
    return db.messages.count_documents({"receiver_id": str(user_id), "is_read": False})


def count_unseen_messages_per_sender(user_id: str) -> Dict[str, int]:
    """Unread messages addressed to user_id, grouped by sender."""
    db = get_database_connection()
    pipeline = [
        {"$match": {"receiver_id": str(user_id), "is_read": False}},
        {"$group": {"_id": "$sender_id", "count": {"$sum": 1}}},
    ]
    return {str(item["_id"]): item["count"] for item in db.messages.aggregate(pipeline)}


def mark_messages_as_read(receiver_id: str, sender_id: str) -> int:
    """Mark every unread message from sender_id to receiver_id as read.

    receiver_id is always the authenticated caller, so only the receiving
    user can flip a message's read flag.
    """
    db = get_database_connection()
    result = db.messages.update_many(
        {"sender_id": str(sender_id), "receiver_id": str(receiver_id), "is_read": False},
        {"$set": {"is_read": True}},
    )
    logger.info(f"Marked {result.modified_count} messages from {sender_id} as read for {receiver_id}")
    return result.modified_count
