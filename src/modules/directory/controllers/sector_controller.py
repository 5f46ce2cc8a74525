from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db, paginate
from modules.auth.dependencies import require_permission
from modules.directory.models import User
from modules.directory.schemas import SectorCreate, SectorUpdate, SectorResponse
from modules.directory.services import SectorService

router = APIRouter(prefix="/admin/sectors", tags=["sectors"])

@router.get("")
def list_sectors(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Listado público, usado también por el formulario de usuarios"""
    sectors, pagination = paginate(SectorService.query_sectors(db, search), page, limit)
    return {
        "success": True,
        "data": {
            "sectors": [SectorResponse.from_sector(s) for s in sectors],
            "pagination": pagination,
        },
    }

@router.post("", status_code=status.HTTP_201_CREATED)
def create_sector(
    payload: SectorCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    sector = SectorService.create_sector(db, payload.name, payload.description)
    return {"success": True, "data": {"sector": SectorResponse.from_sector(sector)}, "message": "Setor criado com sucesso"}

@router.get("/{sector_id}")
def get_sector(
    sector_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    sector = SectorService.get_sector(db, sector_id)
    return {"success": True, "data": {"sector": SectorResponse.from_sector(sector)}}

@router.put("/{sector_id}")
def update_sector(
    sector_id: int,
    payload: SectorUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    sector = SectorService.update_sector(db, sector_id, payload.name, payload.description)
    return {"success": True, "data": {"sector": SectorResponse.from_sector(sector)}, "message": "Setor atualizado com sucesso"}

@router.delete("/{sector_id}")
def delete_sector(
    sector_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    SectorService.delete_sector(db, sector_id)
    return {"success": True, "message": "Setor deletado com sucesso"}
