# Database connection and setup utilities

import logging
import os
import pymongo
from datetime import datetime, timezone
from fastapi import HTTPException

# Configure logging
logger = logging.getLogger(__name__)

MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "streamify")

_client = None


def get_mongo_client() -> pymongo.MongoClient:
    """Return the shared MongoDB client, creating it on first use."""
    global _client
    if _client is None:
        _client = pymongo.MongoClient(MONGO_URI)
        logger.info("MongoDB client created")
    return _client


def get_database_connection():
    """Get database connection with error handling."""
    try:
        return get_mongo_client()[MONGO_DB_NAME]
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        raise HTTPException(status_code=500, detail="Database connection failed")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching what pymongo reads back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def close_mongo_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB client closed")


def setup_db_indexes():
    """
    Set up necessary database indexes for the application.
    This should be called during application startup.
    """
    try:
        db = get_database_connection()

        # Email uniqueness is also checked at signup; the index closes the race
        db.users.create_index(
            [("email", pymongo.ASCENDING)], name="email_1", unique=True
        )
        logger.info("Created unique email index")

        db.messages.create_index(
            [("receiver_id", pymongo.ASCENDING), ("is_read", pymongo.ASCENDING)],
            name="receiver_id_1_is_read_1",
        )
        logger.info("Created unread messages index")

        db.friend_requests.create_index(
            [("sender", pymongo.ASCENDING), ("recipient", pymongo.ASCENDING)],
            name="sender_1_recipient_1",
        )
        db.friend_requests.create_index(
            [("recipient", pymongo.ASCENDING), ("status", pymongo.ASCENDING)],
            name="recipient_1_status_1",
        )
        logger.info("Created friend request indexes")

        logger.info("Database indexes set up successfully")
    except Exception as e:
        logger.error(f"Failed to set up database indexes: {e}")
        raise HTTPException(status_code=500, detail="Database setup failed")
