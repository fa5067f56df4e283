# streamify/models/message.py
# Direct message models

from pydantic import Field
from typing import Optional
from datetime import datetime
from streamify.models.user import CamelModel


class SendMessageRequest(CamelModel):
    receiver_id: Optional[str] = None
    message: Optional[str] = None


class MessageResponse(CamelModel):
    id: str = Field(alias="_id")
    sender_id: str
    receiver_id: str
    message: str
    is_read: bool = False
    created_at: Optional[datetime] = None


class UnseenCountResponse(CamelModel):
    count: int


class StreamTokenResponse(CamelModel):
    token: str
