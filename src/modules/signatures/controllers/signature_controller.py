from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db, paginate
from modules.auth.dependencies import get_current_user
from modules.directory.models import User
from modules.signatures.schemas import SignatureCreate, SignatureResponse, SignatureUpdate
from modules.signatures.services import SignatureService
from modules.workflow.services import RequestService

router = APIRouter(tags=["signatures"])

@router.get("/signatures")
def list_signatures(
    search: Optional[str] = Query(None),
    token: Optional[str] = Query(None),
    server_name: Optional[str] = Query(None, alias="serverName"),
    sector_name: Optional[str] = Query(None, alias="sectorName"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = SignatureService.query_signatures(
        db,
        search=search,
        token=token,
        server_name=server_name,
        sector_name=sector_name,
        date_from=date_from,
        date_to=date_to,
    )
    signatures, pagination = paginate(query, page, limit)
    return {
        "success": True,
        "data": {"signatures": [SignatureResponse.from_signature(s) for s in signatures], "pagination": pagination},
    }

@router.post("/signatures", status_code=status.HTTP_201_CREATED)
def create_signature(
    payload: SignatureCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    signature = SignatureService.create_signature(db, current_user, payload.reason, payload.token)
    return {
        "success": True,
        "data": {"signature": SignatureResponse.from_signature(signature)},
        "message": "Assinatura criada com sucesso",
    }

@router.get("/signatures/{signature_id}")
def get_signature(
    signature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    signature = SignatureService.get_signature(db, current_user, signature_id)
    return {"success": True, "data": {"signature": SignatureResponse.from_signature(signature)}}

@router.put("/signatures/{signature_id}")
def update_signature(
    signature_id: int,
    payload: SignatureUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    signature = SignatureService.update_signature(db, current_user, signature_id, payload.reason, payload.token)
    return {
        "success": True,
        "data": {"signature": SignatureResponse.from_signature(signature)},
        "message": "Assinatura atualizada com sucesso",
    }

@router.delete("/signatures/{signature_id}")
def delete_signature(
    signature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    storage_errors = SignatureService.delete_signature(db, current_user, signature_id)
    return {
        "success": True,
        "data": {"storage_errors": storage_errors},
        "message": "Assinatura deletada com sucesso",
    }

@router.get("/signatures/{signature_id}/can-edit")
def can_edit_signature(
    signature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    permission = RequestService.can_edit(db, current_user, signature_id)
    return {"success": True, "data": permission}

@router.put("/signatures/{signature_id}/edit")
def apply_approved_edit(
    signature_id: int,
    payload: SignatureUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    signature = RequestService.apply_approved_edit(db, current_user, signature_id, payload.reason, payload.token)
    return {
        "success": True,
        "data": {"signature": SignatureResponse.from_signature(signature)},
        "message": "Assinatura editada com sucesso",
    }

@router.get("/tokens")
def list_tokens(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": {"tokens": SignatureService.get_tokens()}}

@router.get("/servers")
def list_servers(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"success": True, "data": {"servers": SignatureService.get_servers(db)}}
