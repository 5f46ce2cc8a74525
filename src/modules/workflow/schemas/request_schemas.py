from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from modules.directory.schemas import UserSummary
from modules.workflow.models import RequestStatus, RequestType

class RequestCreate(BaseModel):
    type: str
    signature_id: int
    reason: str

class AdjudicateRequest(BaseModel):
    status: str
    admin_response: Optional[str] = None

class SignatureBrief(BaseModel):
    id: int
    incremental_id: int
    reason: str
    token: str

    model_config = {"from_attributes": True}

class RequestResponse(BaseModel):
    id: Optional[int] = None
    type: RequestType
    status: RequestStatus
    reason: str
    admin_response: Optional[str] = None
    user_id: int
    signature_id: int
    responded_by_id: Optional[int] = None
    user: Optional[UserSummary] = None
    responded_by: Optional[UserSummary] = None
    signature: Optional[SignatureBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_request(cls, request) -> "RequestResponse":
        return cls(
            id=request.id,
            type=request.type,
            status=request.status,
            reason=request.reason,
            admin_response=request.admin_response,
            user_id=request.user_id,
            signature_id=request.signature_id,
            responded_by_id=request.responded_by_id,
            user=UserSummary.model_validate(request.user) if request.user else None,
            responded_by=UserSummary.model_validate(request.responded_by) if request.responded_by else None,
            signature=SignatureBrief.model_validate(request.signature) if request.signature else None,
            created_at=request.created_at,
            updated_at=request.updated_at,
        )

class EditPermission(BaseModel):
    can_edit: bool
    reason: str
    request_id: Optional[int] = None
    approved_at: Optional[datetime] = None
