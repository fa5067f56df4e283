# streamify/routes/users.py
# Friend graph routes: recommendations, friends and friend requests

import logging
from typing import List
from fastapi import APIRouter, HTTPException, status, Depends
from streamify.models.friend_request import FriendRequestResponse, FriendRequestsResponse
from streamify.models.user import PublicUserResponse
from streamify.services.user_service import (
    get_recommended_users,
    get_friends,
    send_friend_request,
    accept_friend_request,
    get_friend_requests,
    get_outgoing_friend_requests,
)
from streamify.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error in {action}: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal Server Error",
    )


@router.get("/", response_model=List[PublicUserResponse])
def recommended_users(current_user: dict = Depends(get_current_user)):
    """Onboarded users the caller is not yet friends with."""
    try:
        return get_recommended_users(current_user)
    except Exception as e:
        raise _internal_error("getRecommendedUsers", e)


@router.get("/friends", response_model=List[PublicUserResponse])
def my_friends(current_user: dict = Depends(get_current_user)):
    try:
        return get_friends(current_user)
    except Exception as e:
        raise _internal_error("getMyFriends", e)


@router.post(
    "/friend-request/{recipient_id}",
    response_model=FriendRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_friend_request(recipient_id: str, current_user: dict = Depends(get_current_user)):
    logger.info(f"Friend request from {current_user['_id']} to {recipient_id}")
    try:
        return send_friend_request(current_user, recipient_id)
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("sendFriendRequest", e)


@router.put("/friend-request/{request_id}/accept", response_model=FriendRequestResponse)
def accept_request(request_id: str, current_user: dict = Depends(get_current_user)):
    logger.info(f"User {current_user['_id']} accepting friend request {request_id}")
    try:
        return accept_friend_request(current_user, request_id)
    except HTTPException:
        raise
    except Exception as e:
        raise _internal_error("acceptFriendRequest", e)


@router.get("/friend-requests", response_model=FriendRequestsResponse)
def friend_requests(current_user: dict = Depends(get_current_user)):
    """Incoming pending requests and the caller's requests that were accepted."""
    try:
        return get_friend_requests(current_user)
    except Exception as e:
        raise _internal_error("getFriendRequests", e)


@router.get("/outgoing-friend-requests", response_model=List[FriendRequestResponse])
def outgoing_friend_requests(current_user: dict = Depends(get_current_user)):
    try:
        return get_outgoing_friend_requests(current_user)
    except Exception as e:
        raise _internal_error("getOutgoingFriendReqs", e)
