from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db, paginate
from modules.auth.dependencies import get_current_user, require_permission
from modules.directory.models import User
from modules.workflow.models import RequestStatus, RequestType
from modules.workflow.schemas import AdjudicateRequest, RequestCreate, RequestResponse
from modules.workflow.services import RequestService

router = APIRouter(tags=["requests"])

@router.post("/requests", status_code=status.HTTP_201_CREATED)
def create_request(
    payload: RequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    request = RequestService.create_request(db, current_user, payload.type, payload.signature_id, payload.reason)
    return {
        "success": True,
        "data": {"request": RequestResponse.from_request(request)},
        "message": "Solicitação criada com sucesso",
    }

@router.get("/requests")
def list_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = RequestService.query_requests(db, current_user, status_filter)
    requests, pagination = paginate(query, page, limit)
    return {
        "success": True,
        "data": {"requests": [RequestResponse.from_request(r) for r in requests], "pagination": pagination},
    }

@router.get("/requests/{request_id}")
def get_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    request = RequestService.get_request(db, current_user, request_id)
    return {"success": True, "data": {"request": RequestResponse.from_request(request)}}

@router.put("/admin/requests/{request_id}")
def adjudicate_request(
    request_id: int,
    payload: AdjudicateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("adjudicate")),
):
    request = RequestService.adjudicate(db, current_user, request_id, payload.status, payload.admin_response)
    approved = request.status == RequestStatus.APPROVED
    message = f"Solicitação {'aprovada' if approved else 'rejeitada'} com sucesso"
    if approved and request.type == RequestType.DELETE:
        message = "Solicitação aprovada e assinatura deletada com sucesso"
    return {"success": True, "data": {"request": RequestResponse.from_request(request)}, "message": message}
