from .auth_schemas import (
    LoginRequest, TokenResponse, ProfileResponse, ChangePasswordRequest,
    SecurityQuestionRequest, ValidateSecurityRequest, ForgotPasswordRequest
)

__all__ = [
    'LoginRequest', 'TokenResponse', 'ProfileResponse', 'ChangePasswordRequest',
    'SecurityQuestionRequest', 'ValidateSecurityRequest', 'ForgotPasswordRequest'
]
