from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from modules.chat.schemas import Participant

class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    description: str
    is_read: bool = False
    created_at: datetime
    related_data: dict = {}
    from_user: Optional[Participant] = None

class NotificationCount(BaseModel):
    unread_count: int
    unread_messages: int
    pending_requests: int
