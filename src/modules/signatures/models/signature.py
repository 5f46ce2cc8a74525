from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from database import Base

class Signature(Base):
    __tablename__ = 'signatures'

    id = Column(Integer, primary_key=True)
    incremental_id = Column(Integer, unique=True, nullable=False)
    reason = Column(String(1000), nullable=False)
    token = Column(String(120), nullable=False)

    # Point-in-time copies of the creator's name and sector, never re-synced
    server_name = Column(String(200), nullable=False)
    sector_name = Column(String(120), nullable=False)

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False)
    sector_id = Column(Integer, ForeignKey('sectors.id'), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="signatures")
    sector = relationship("Sector", back_populates="signatures")

    attachments = relationship(
        "Attachment",
        back_populates="signature",
        order_by="Attachment.uploaded_at.desc()",
        cascade="all, delete-orphan",
    )
    requests = relationship(
        "Request",
        back_populates="signature",
        cascade="all, delete-orphan",
    )
