from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from config import AUTH_COOKIE_NAME
from database import get_db
from errors import UnauthorizedError, ValidationError
from modules.auth.dependencies import get_current_user
from modules.auth.services.auth_service import AuthService
from modules.auth.schemas import (
    LoginRequest, TokenResponse, ProfileResponse, ChangePasswordRequest,
    SecurityQuestionRequest, ValidateSecurityRequest, ForgotPasswordRequest
)
from modules.directory.models import User
from modules.directory.schemas.directory_schemas import SectorSummary

router = APIRouter(prefix="/auth", tags=["authentication"])

def _profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        username=user.username,
        name=user.name,
        role=user.role,
        sector_id=user.sector_id,
        sector=SectorSummary.model_validate(user.sector) if user.sector else None,
        is_first_login=user.is_first_login,
        has_security_question=bool(user.security_question),
    )

@router.post("/login")
def login(login_data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Endpoint de login"""
    if not login_data.username or not login_data.password:
        raise ValidationError("Username e senha são obrigatórios")
    user = AuthService.authenticate_user(db, login_data.username, login_data.password)
    if not user:
        raise UnauthorizedError("Credenciais inválidas")

    access_token, max_age = AuthService.create_access_token(user, remember_me=login_data.remember_me)
    response.set_cookie(
        AUTH_COOKIE_NAME, access_token, max_age=max_age, httponly=True, samesite="lax", path="/"
    )

    token = TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user_id=user.id,
        username=user.username,
        user_name=user.name,
        user_role=user.role,
        is_first_login=user.is_first_login,
    )
    return {"success": True, "data": token}

@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(AUTH_COOKIE_NAME, path="/")
    return {"success": True, "message": "Sessão encerrada"}

@router.get("/me")
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Obtener información del usuario actual"""
    return {"success": True, "data": {"user": _profile(current_user)}}

@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    AuthService.change_password(db, current_user, payload.new_password, payload.confirm_password)
    return {"success": True, "message": "Senha alterada com sucesso"}

@router.post("/security-question")
def set_security_question(
    payload: SecurityQuestionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    AuthService.set_security_question(db, current_user, payload.question, payload.answer)
    return {"success": True, "message": "Pergunta de segurança configurada com sucesso"}

@router.get("/forgot-password")
def get_security_question(username: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    question = AuthService.get_security_question(db, username)
    return {"success": True, "data": {"security_question": question}}

@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    AuthService.reset_password_with_answer(db, payload.username, payload.security_answer, payload.new_password)
    return {"success": True, "message": "Senha alterada com sucesso"}

@router.post("/validate-security")
def validate_security(payload: ValidateSecurityRequest, db: Session = Depends(get_db)):
    if not payload.username or not payload.security_answer:
        raise ValidationError("Username e resposta de segurança são obrigatórios")
    if not AuthService.validate_security_answer(db, payload.username, payload.security_answer):
        raise UnauthorizedError("Resposta de segurança incorreta")
    return {"success": True, "message": "Resposta de segurança validada com sucesso"}
