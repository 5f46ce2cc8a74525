import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from errors import ConflictError, NotFoundError, ValidationError
from modules.auth.services.auth_service import AuthService
from modules.directory.models import Sector, User, UserRole
from modules.workflow.models import Request

logger = logging.getLogger(__name__)

class UserService:

    @staticmethod
    def query_users(
        session: Session,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        sector_id: Optional[int] = None,
    ):
        query = session.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.username.ilike(pattern), User.name.ilike(pattern)))
        if role is not None:
            query = query.filter(User.role == role)
        if sector_id is not None:
            query = query.filter(User.sector_id == sector_id)
        return query.order_by(User.created_at.desc())

    @staticmethod
    def get_user(session: Session, user_id: int) -> User:
        user = session.get(User, user_id)
        if not user:
            raise NotFoundError("Usuário não encontrado")
        return user

    @staticmethod
    def create_user(
        session: Session,
        username: str,
        name: str,
        password: str,
        role: UserRole,
        sector_id: int,
    ) -> User:
        username = (username or "").strip()
        name = (name or "").strip()
        if not username or not name or not password or not role or not sector_id:
            raise ValidationError("Todos os campos são obrigatórios")
        if session.query(User).filter(User.username == username).first():
            raise ConflictError("Username já está em uso")
        UserService._require_sector(session, sector_id)

        user = User(
            username=username,
            name=name,
            password_hash=AuthService.get_password_hash(password),
            role=role,
            sector_id=sector_id,
            is_first_login=True,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info("User %s created with role %s", user.username, user.role.value)
        return user

    @staticmethod
    def update_user(
        session: Session,
        user_id: int,
        username: str,
        name: str,
        role: UserRole,
        sector_id: int,
        password: Optional[str] = None,
    ) -> User:
        username = (username or "").strip()
        name = (name or "").strip()
        if not username or not name or not role or not sector_id:
            raise ValidationError("Username, nome, role e setor são obrigatórios")
        user = UserService.get_user(session, user_id)

        if username != user.username and session.query(User).filter(User.username == username).first():
            raise ConflictError("Username já está em uso")
        UserService._require_sector(session, sector_id)

        user.username = username
        user.name = name
        user.role = role
        user.sector_id = sector_id
        if password:
            user.password_hash = AuthService.get_password_hash(password)
            # forces a password change on next login
            user.is_first_login = True

        session.commit()
        session.refresh(user)
        return user

    @staticmethod
    def delete_user(session: Session, user_id: int, acting_user_id: int):
        user = UserService.get_user(session, user_id)
        if user.id == acting_user_id:
            raise ConflictError("Não é possível deletar sua própria conta")
        if user.signatures or user.requests:
            raise ConflictError("Não é possível deletar usuário com assinaturas ou solicitações")

        # adjudications stay, without the responder
        session.query(Request).filter(Request.responded_by_id == user.id).update(
            {"responded_by_id": None}, synchronize_session=False
        )
        session.delete(user)
        session.commit()
        logger.info("User %s deleted", user_id)

    @staticmethod
    def _require_sector(session: Session, sector_id: int) -> Sector:
        sector = session.get(Sector, sector_id)
        if not sector:
            raise ValidationError("Setor não encontrado")
        return sector
