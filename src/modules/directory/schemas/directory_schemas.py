from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from modules.directory.models import UserRole

class SectorSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}

class SectorCreate(BaseModel):
    name: str
    description: Optional[str] = None

class SectorUpdate(BaseModel):
    name: str
    description: Optional[str] = None

class SectorResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    user_count: int = 0
    signature_count: int = 0

    @classmethod
    def from_sector(cls, sector) -> "SectorResponse":
        return cls(
            id=sector.id,
            name=sector.name,
            description=sector.description,
            created_at=sector.created_at,
            user_count=len(sector.users),
            signature_count=len(sector.signatures),
        )

class UserSummary(BaseModel):
    id: int
    name: str
    username: str

    model_config = {"from_attributes": True}

class UserCreate(BaseModel):
    username: str
    name: str
    password: str
    role: UserRole
    sector_id: int

class UserUpdate(BaseModel):
    username: str
    name: str
    role: UserRole
    sector_id: int
    password: Optional[str] = None

class UserResponse(BaseModel):
    id: int
    username: str
    name: str
    role: UserRole
    sector_id: int
    sector: Optional[SectorSummary] = None
    is_first_login: bool
    created_at: Optional[datetime] = None
    signature_count: int = 0
    request_count: int = 0

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            role=user.role,
            sector_id=user.sector_id,
            sector=SectorSummary.model_validate(user.sector) if user.sector else None,
            is_first_login=user.is_first_login,
            created_at=user.created_at,
            signature_count=len(user.signatures),
            request_count=len(user.requests),
        )
