from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from database import Base

class Attachment(Base):
    __tablename__ = 'signature_attachments'

    id = Column(Integer, primary_key=True)
    signature_id = Column(Integer, ForeignKey('signatures.id', ondelete="CASCADE"), nullable=False)
    filename = Column(String(255), nullable=False)
    storage_path = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(120), nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    signature = relationship("Signature", back_populates="attachments")
