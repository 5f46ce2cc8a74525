from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum
from datetime import datetime
from database import Base

class UserRole(PyEnum):
    COMMON = "COMMON"
    ADMIN = "ADMIN"
    SUPPORT = "SUPPORT"

PRIVILEGED_ROLES = (UserRole.ADMIN, UserRole.SUPPORT)

class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    username = Column(String(80), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.COMMON)
    sector_id = Column(Integer, ForeignKey('sectors.id'), nullable=False)

    is_first_login = Column(Boolean, default=True, nullable=False)
    security_question = Column(String(255), nullable=True)
    security_answer_hash = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    sector = relationship("Sector", back_populates="users")
    signatures = relationship("Signature", back_populates="user")
    requests = relationship("Request", back_populates="user", foreign_keys="Request.user_id")

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES
