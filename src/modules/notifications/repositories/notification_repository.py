from typing import List

from sqlalchemy.orm import Session

from modules.chat.repositories import ChatRepository
from modules.workflow.models import Request, RequestStatus

class NotificationRepository:
    """Read side over chat messages and pending requests; notifications have no table of their own"""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.messages = ChatRepository(db_session)

    def find_pending_requests(self, limit: int = 30) -> List[Request]:
        return (
            self.db
            .query(Request)
            .filter(Request.status == RequestStatus.PENDING)
            .order_by(Request.created_at.desc(), Request.id.desc())
            .limit(limit)
            .all()
        )

    def count_pending_requests(self) -> int:
        return self.db.query(Request).filter(Request.status == RequestStatus.PENDING).count()
