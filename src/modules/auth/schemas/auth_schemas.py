from pydantic import BaseModel
from typing import Optional
from modules.directory.models import UserRole
from modules.directory.schemas.directory_schemas import SectorSummary

class LoginRequest(BaseModel):
    username: str
    password: str
    remember_me: bool = False

class TokenResponse(BaseModel):
    access_token: str
    token_type: str
    user_id: int
    username: str
    user_name: str
    user_role: UserRole
    is_first_login: bool

class ProfileResponse(BaseModel):
    id: int
    username: str
    name: str
    role: UserRole
    sector_id: int
    sector: Optional[SectorSummary] = None
    is_first_login: bool
    has_security_question: bool

class ChangePasswordRequest(BaseModel):
    new_password: str
    confirm_password: str

class SecurityQuestionRequest(BaseModel):
    question: str
    answer: str

class ValidateSecurityRequest(BaseModel):
    username: str
    security_answer: str

class ForgotPasswordRequest(BaseModel):
    username: str
    security_answer: str
    new_password: str
