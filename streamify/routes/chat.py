# streamify/routes/chat.py
# Chat routes: Stream tokens, direct messages and unseen counters

import logging
from typing import Dict
from fastapi import APIRouter, HTTPException, status, Depends
from streamify.exceptions import StreamConfigurationError
from streamify.models.message import (
    SendMessageRequest,
    MessageResponse,
    UnseenCountResponse,
    StreamTokenResponse,
)
from streamify.services.chat_service import (
    send_message,
    count_unseen_messages,
    count_unseen_messages_per_sender,
    mark_messages_as_read,
)
from streamify.services.stream_service import generate_stream_token
from streamify.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/token", response_model=StreamTokenResponse)
def get_stream_token(current_user: dict = Depends(get_current_user)):
    """Issue a Stream client token for the current user."""
    try:
        return StreamTokenResponse(token=generate_stream_token(current_user["_id"]))
    except StreamConfigurationError as e:
        logger.error(f"Error in getStreamToken: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


@router.get("/unseen-count", response_model=UnseenCountResponse)
def unseen_count(current_user: dict = Depends(get_current_user)):
    try:
        return UnseenCountResponse(count=count_unseen_messages(current_user["_id"]))
    except Exception as e:
        logger.error(f"Error in getUnseenMessagesCount: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


@router.get("/unseen-per-user", response_model=Dict[str, int])
def unseen_per_user(current_user: dict = Depends(get_current_user)):
    """Unread message counts keyed by sender id."""
    try:
        return count_unseen_messages_per_sender(current_user["_id"])
    except Exception as e:
        logger.error(f"Error in getUnseenMessagesPerUser: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


@router.post("/send", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def send(request: SendMessageRequest, current_user: dict = Depends(get_current_user)):
    if not request.receiver_id or not request.message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Receiver ID and message are required",
        )

    try:
        return send_message(current_user["_id"], request.receiver_id, request.message)
    except Exception as e:
        logger.error(f"Error in sendMessage: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


@router.put("/mark-read/{sender_id}")
def mark_read(sender_id: str, current_user: dict = Depends(get_current_user)):
    """Mark messages from sender_id to the current user as read."""
    try:
        mark_messages_as_read(current_user["_id"], sender_id)
        return {"message": "Messages marked as read"}
    except Exception as e:
        logger.error(f"Error in markMessagesAsRead: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )
