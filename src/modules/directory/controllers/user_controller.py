from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db, paginate
from modules.auth.dependencies import require_permission
from modules.directory.models import User, UserRole
from modules.directory.schemas import UserCreate, UserUpdate, UserResponse
from modules.directory.services import UserService

router = APIRouter(prefix="/admin/users", tags=["users"])

@router.get("")
def list_users(
    search: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    sector_id: Optional[int] = Query(None, alias="sectorId"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    query = UserService.query_users(db, search=search, role=role, sector_id=sector_id)
    users, pagination = paginate(query, page, limit)
    return {
        "success": True,
        "data": {"users": [UserResponse.from_user(u) for u in users], "pagination": pagination},
    }

@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    user = UserService.create_user(
        db,
        username=payload.username,
        name=payload.name,
        password=payload.password,
        role=payload.role,
        sector_id=payload.sector_id,
    )
    return {"success": True, "data": {"user": UserResponse.from_user(user)}, "message": "Usuário criado com sucesso"}

@router.get("/{user_id}")
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    user = UserService.get_user(db, user_id)
    return {"success": True, "data": {"user": UserResponse.from_user(user)}}

@router.put("/{user_id}")
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    user = UserService.update_user(
        db,
        user_id,
        username=payload.username,
        name=payload.name,
        role=payload.role,
        sector_id=payload.sector_id,
        password=payload.password,
    )
    return {"success": True, "data": {"user": UserResponse.from_user(user)}, "message": "Usuário atualizado com sucesso"}

@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("manage")),
):
    UserService.delete_user(db, user_id, acting_user_id=current_user.id)
    return {"success": True, "message": "Usuário deletado com sucesso"}
