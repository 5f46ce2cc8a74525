from datetime import datetime
from typing import Optional

from pydantic import BaseModel

class Participant(BaseModel):
    id: str
    name: str
    username: str
    role: str
    is_guest: bool = False
    sector_name: Optional[str] = None

class ChatMessageResponse(BaseModel):
    id: int
    from_user_id: str
    to_user_id: str
    message: str
    is_read: bool
    created_at: datetime
    from_user: Optional[Participant] = None
    to_user: Optional[Participant] = None

class ConversationSummary(BaseModel):
    user: Participant
    last_message: str
    last_message_at: datetime
    unread_count: int = 0

class SendMessageRequest(BaseModel):
    to_user_id: str
    message: str

class GuestMessageRequest(BaseModel):
    username: str
    name: str
    message: str
