# streamify/models/friend_request.py
# Friend request models

from enum import Enum
from pydantic import Field
from typing import List, Optional, Union
from datetime import datetime
from streamify.models.user import CamelModel, PublicUserResponse


class FriendRequestStatus(str, Enum):
    """A request starts pending and can only move to accepted."""

    PENDING = "pending"
    ACCEPTED = "accepted"


class FriendRequestResponse(CamelModel):
    id: str = Field(alias="_id")
    # Either a bare user id or the populated profile
    sender: Union[PublicUserResponse, str]
    recipient: Union[PublicUserResponse, str]
    status: FriendRequestStatus = FriendRequestStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FriendRequestsResponse(CamelModel):
    incoming_reqs: List[FriendRequestResponse] = []
    accepted_reqs: List[FriendRequestResponse] = []
