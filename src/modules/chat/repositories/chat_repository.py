from typing import Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from modules.chat.models import ChatMessage

class ChatRepository:
    def __init__(self, db_session: Session):
        self.db = db_session

    def save(self, message: ChatMessage) -> ChatMessage:
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def get(self, message_id: int) -> Optional[ChatMessage]:
        return self.db.get(ChatMessage, message_id)

    def find_between(self, participant_a: str, participant_b: str, limit: int = 100) -> List[ChatMessage]:
        """Latest messages exchanged by two participants, oldest first"""
        latest = (
            self.db
            .query(ChatMessage)
            .filter(or_(
                and_(ChatMessage.from_user_id == participant_a, ChatMessage.to_user_id == participant_b),
                and_(ChatMessage.from_user_id == participant_b, ChatMessage.to_user_id == participant_a),
            ))
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
            .all()
        )
        return list(reversed(latest))

    def find_involving(self, participant_id: str) -> List[ChatMessage]:
        return (
            self.db
            .query(ChatMessage)
            .filter(or_(ChatMessage.from_user_id == participant_id, ChatMessage.to_user_id == participant_id))
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            .all()
        )

    def find_by_recipient(self, recipient_id: str, limit: int = 30) -> List[ChatMessage]:
        return (
            self.db
            .query(ChatMessage)
            .filter(ChatMessage.to_user_id == recipient_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
            .all()
        )

    def find_guest_senders(self, recipient_id: str) -> List[ChatMessage]:
        return (
            self.db
            .query(ChatMessage)
            .filter(
                ChatMessage.to_user_id == recipient_id,
                ChatMessage.from_user_id.like("guest-%"),
            )
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .all()
        )

    def count_unread(self, recipient_id: str) -> int:
        return (
            self.db
            .query(ChatMessage)
            .filter(ChatMessage.to_user_id == recipient_id, ChatMessage.is_read.is_(False))
            .count()
        )

    def mark_read(self, sender_id: str, recipient_id: str) -> int:
        updated = (
            self.db
            .query(ChatMessage)
            .filter(
                ChatMessage.from_user_id == sender_id,
                ChatMessage.to_user_id == recipient_id,
                ChatMessage.is_read.is_(False),
            )
            .update({"is_read": True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def mark_all_read(self, recipient_id: str) -> int:
        updated = (
            self.db
            .query(ChatMessage)
            .filter(ChatMessage.to_user_id == recipient_id, ChatMessage.is_read.is_(False))
            .update({"is_read": True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def update(self, message_id: int, data: Dict) -> Optional[ChatMessage]:
        message = self.db.get(ChatMessage, message_id)
        if not message:
            return None
        for field, value in data.items():
            setattr(message, field, value)
        self.db.commit()
        self.db.refresh(message)
        return message

    def delete(self, message: ChatMessage):
        self.db.delete(message)
        self.db.commit()
