from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from database import Base

class RequestType(PyEnum):
    EDIT = "EDIT"
    DELETE = "DELETE"

class RequestStatus(PyEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    # An approved EDIT grant that has already been used
    CONSUMED = "CONSUMED"

class Request(Base):
    __tablename__ = 'requests'
    __table_args__ = (
        # At most one PENDING request per signature
        Index(
            'uq_requests_one_pending_per_signature',
            'signature_id',
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
    )

    id = Column(Integer, primary_key=True)
    type = Column(Enum(RequestType), nullable=False)
    status = Column(Enum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    reason = Column(String(1000), nullable=False)
    admin_response = Column(String(1000), nullable=True)

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    signature_id = Column(Integer, ForeignKey('signatures.id', ondelete="CASCADE"), nullable=False)
    responded_by_id = Column(Integer, ForeignKey('users.id', ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="requests", foreign_keys=[user_id])
    responded_by = relationship("User", foreign_keys=[responded_by_id])
    signature = relationship("Signature", back_populates="requests")
