from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from modules.directory.schemas import SectorSummary, UserSummary

class SignatureCreate(BaseModel):
    reason: str
    token: str

class SignatureUpdate(BaseModel):
    reason: str
    token: str

class AttachmentResponse(BaseModel):
    id: int
    signature_id: int
    filename: str
    file_size: int
    mime_type: str
    uploaded_at: datetime

    model_config = {"from_attributes": True}

class SignatureResponse(BaseModel):
    id: int
    incremental_id: int
    reason: str
    token: str
    server_name: str
    sector_name: str
    user_id: int
    sector_id: int
    user: Optional[UserSummary] = None
    sector: Optional[SectorSummary] = None
    attachments: List[AttachmentResponse] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_signature(cls, signature) -> "SignatureResponse":
        return cls(
            id=signature.id,
            incremental_id=signature.incremental_id,
            reason=signature.reason,
            token=signature.token,
            server_name=signature.server_name,
            sector_name=signature.sector_name,
            user_id=signature.user_id,
            sector_id=signature.sector_id,
            user=UserSummary.model_validate(signature.user) if signature.user else None,
            sector=SectorSummary.model_validate(signature.sector) if signature.sector else None,
            attachments=[AttachmentResponse.model_validate(a) for a in signature.attachments],
            created_at=signature.created_at,
            updated_at=signature.updated_at,
        )
