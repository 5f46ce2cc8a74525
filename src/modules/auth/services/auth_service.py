import logging
import time
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from config import (
    SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_HOURS, REMEMBER_ME_EXPIRE_DAYS,
    AUTH_CACHE_TTL_SECONDS,
)
from errors import NotFoundError, UnauthorizedError, ValidationError
from modules.directory.models import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenCache:
    """Read-through cache of decoded token claims. Never authoritative."""

    def __init__(self, ttl_seconds: int, max_entries: int = 100):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[dict, float]] = {}

    def get(self, token: str) -> Optional[dict]:
        if self.ttl_seconds <= 0:
            return None
        entry = self._entries.get(token)
        if entry is None:
            return None
        claims, expires = entry
        if expires <= time.monotonic():
            self._entries.pop(token, None)
            return None
        return claims

    def set(self, token: str, claims: dict):
        if self.ttl_seconds <= 0:
            return
        ttl = self.ttl_seconds
        # never outlive the token itself
        if claims.get("exp") is not None:
            ttl = min(ttl, float(claims["exp"]) - time.time())
        if ttl <= 0:
            return
        self._entries.pop(token, None)
        self._entries[token] = (claims, time.monotonic() + ttl)
        if len(self._entries) > self.max_entries:
            self._purge_expired()
        while len(self._entries) > self.max_entries:
            # oldest insertion first
            del self._entries[next(iter(self._entries))]

    def discard(self, token: str):
        self._entries.pop(token, None)

    def clear(self):
        self._entries.clear()

    def _purge_expired(self):
        now = time.monotonic()
        for key in [k for k, (_, exp) in self._entries.items() if exp <= now]:
            del self._entries[key]


token_cache = TokenCache(AUTH_CACHE_TTL_SECONDS)


class AuthService:

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verifica si la contraseña coincide con el hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Genera hash de la contraseña"""
        return pwd_context.hash(password)

    @staticmethod
    def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
        """Authenticates by username and password"""
        user = db.query(User).filter(User.username == username).first()
        if not user:
            return None
        if not AuthService.verify_password(password, user.password_hash):
            return None
        return user

    @staticmethod
    def create_access_token(user: User, remember_me: bool = False) -> Tuple[str, int]:
        """Returns the signed token and its lifetime in seconds"""
        if remember_me:
            expires_delta = timedelta(days=REMEMBER_ME_EXPIRE_DAYS)
        else:
            expires_delta = timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)
        to_encode = {
            "sub": str(user.id),
            "username": user.username,
            "role": user.role.value,
            "exp": datetime.utcnow() + expires_delta,
        }
        encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
        return encoded_jwt, int(expires_delta.total_seconds())

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Decodes the token and returns its claims, or None when invalid"""
        cached = token_cache.get(token)
        if cached is not None:
            return cached
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError:
            token_cache.discard(token)
            return None
        if payload.get("sub") is None:
            return None
        token_cache.set(token, payload)
        return payload

    @staticmethod
    def get_current_user(db: Session, token: str) -> Optional[User]:
        """Obtiene usuario actual desde token"""
        claims = AuthService.verify_token(token)
        if claims is None:
            return None
        try:
            user_id = int(claims["sub"])
        except (TypeError, ValueError):
            return None
        return db.get(User, user_id)

    @staticmethod
    def change_password(db: Session, user: User, new_password: str, confirm_password: str) -> User:
        if not new_password or not confirm_password:
            raise ValidationError("Nova senha e confirmação são obrigatórias")
        if new_password != confirm_password:
            raise ValidationError("Senhas não conferem")
        AuthService._set_password(user, new_password)
        db.commit()
        db.refresh(user)
        logger.info("Password changed for user %s", user.username)
        return user

    @staticmethod
    def set_security_question(db: Session, user: User, question: str, answer: str) -> User:
        question = (question or "").strip()
        answer = (answer or "").strip()
        if not question or not answer:
            raise ValidationError("Pergunta e resposta são obrigatórias")
        user.security_question = question
        user.security_answer_hash = AuthService.get_password_hash(answer)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_security_question(db: Session, username: str) -> str:
        user = db.query(User).filter(User.username == username).first()
        if not user or not user.security_question:
            raise NotFoundError("Usuário não encontrado ou pergunta de segurança não configurada")
        return user.security_question

    @staticmethod
    def validate_security_answer(db: Session, username: str, answer: str) -> bool:
        user = db.query(User).filter(User.username == username).first()
        if not user or not user.security_answer_hash:
            return False
        return AuthService.verify_password(answer, user.security_answer_hash)

    @staticmethod
    def reset_password_with_answer(db: Session, username: str, answer: str, new_password: str) -> User:
        """Password recovery through the security question"""
        if not username or not answer or not new_password:
            raise ValidationError("Todos os campos são obrigatórios")
        user = db.query(User).filter(User.username == username).first()
        if not user or not user.security_question:
            raise NotFoundError("Usuário não encontrado ou pergunta de segurança não configurada")
        if not AuthService.validate_security_answer(db, username, answer):
            raise UnauthorizedError("Resposta de segurança incorreta")
        AuthService._set_password(user, new_password)
        db.commit()
        db.refresh(user)
        logger.info("Password reset through security question for user %s", username)
        return user

    @staticmethod
    def _set_password(user: User, new_password: str):
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres")
        user.password_hash = AuthService.get_password_hash(new_password)
        user.is_first_login = False
