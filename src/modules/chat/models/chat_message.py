from datetime import datetime
from sqlalchemy import Boolean, Column, Integer, String, DateTime, Text

from database import Base

GUEST_PREFIX = "guest-"

class ChatMessage(Base):
    __tablename__ = 'chat_messages'

    id = Column(Integer, primary_key=True)
    # Participant ids are plain strings: str(user.id) or "guest-<username>"
    from_user_id = Column(String(120), nullable=False, index=True)
    to_user_id = Column(String(120), nullable=False, index=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    @property
    def from_guest(self) -> bool:
        return self.from_user_id.startswith(GUEST_PREFIX)
