import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from config import ALLOWED_SIGNATURE_TOKENS, ALLOW_OWNER_DIRECT_UPDATE, ALLOW_OWNER_DIRECT_DELETE
from errors import ForbiddenError, NotFoundError, ValidationError
from modules.auth.permissions import can_perform_action
from modules.directory.models import User
from modules.signatures import storage
from modules.signatures.models import Signature

logger = logging.getLogger(__name__)

class SignatureService:

    @staticmethod
    def create_signature(session: Session, actor: User, reason: str, token: str) -> Signature:
        if not can_perform_action(actor.role, "create_signature"):
            raise ForbiddenError("Usuários de suporte não podem criar assinaturas")
        reason = (reason or "").strip()
        token = (token or "").strip()
        if not reason or not token:
            raise ValidationError("Motivo e token são obrigatórios")

        next_id = (session.query(func.max(Signature.incremental_id)).scalar() or 0) + 1
        signature = Signature(
            incremental_id=next_id,
            reason=reason,
            token=token,
            # Snapshot of the creator at this moment
            server_name=actor.name,
            sector_name=actor.sector.name,
            user_id=actor.id,
            sector_id=actor.sector_id,
        )
        session.add(signature)
        session.commit()
        session.refresh(signature)
        logger.info("Signature #%s created by %s", signature.incremental_id, actor.username)
        return signature

    @staticmethod
    def query_signatures(
        session: Session,
        search: Optional[str] = None,
        token: Optional[str] = None,
        server_name: Optional[str] = None,
        sector_name: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ):
        query = session.query(Signature)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Signature.reason.ilike(pattern),
                Signature.token.ilike(pattern),
                Signature.server_name.ilike(pattern),
                Signature.sector_name.ilike(pattern),
            ))
        if token:
            query = query.filter(Signature.token == token)
        if server_name:
            query = query.filter(Signature.server_name == server_name)
        if sector_name:
            query = query.filter(Signature.sector_name == sector_name)
        if date_from:
            query = query.filter(Signature.created_at >= date_from)
        if date_to:
            # inclusive of the whole end day
            if date_to.time() == datetime.min.time():
                date_to = date_to + timedelta(days=1)
                query = query.filter(Signature.created_at < date_to)
            else:
                query = query.filter(Signature.created_at <= date_to)
        return query.order_by(Signature.created_at.desc(), Signature.id.desc())

    @staticmethod
    def find_signature(session: Session, signature_id: int) -> Signature:
        signature = session.get(Signature, signature_id)
        if not signature:
            raise NotFoundError("Assinatura não encontrada")
        return signature

    @staticmethod
    def get_signature(session: Session, actor: User, signature_id: int) -> Signature:
        signature = SignatureService.find_signature(session, signature_id)
        if signature.user_id != actor.id and not actor.is_privileged:
            raise ForbiddenError("Sem permissão para acessar esta assinatura")
        return signature

    @staticmethod
    def update_signature(session: Session, actor: User, signature_id: int, reason: str, token: str) -> Signature:
        """Direct update, not gated by the request workflow"""
        signature = SignatureService.find_signature(session, signature_id)
        is_owner = signature.user_id == actor.id
        if not actor.is_privileged and not (is_owner and ALLOW_OWNER_DIRECT_UPDATE):
            raise ForbiddenError("Sem permissão para editar esta assinatura")
        return SignatureService.write_fields(session, signature, reason, token)

    @staticmethod
    def write_fields(session: Session, signature: Signature, reason: str, token: str) -> Signature:
        reason = (reason or "").strip()
        token = (token or "").strip()
        if not reason or not token:
            raise ValidationError("Motivo e token são obrigatórios")
        signature.reason = reason
        signature.token = token
        session.commit()
        session.refresh(signature)
        return signature

    @staticmethod
    def delete_signature(session: Session, actor: User, signature_id: int) -> List[str]:
        signature = SignatureService.find_signature(session, signature_id)
        is_owner = signature.user_id == actor.id
        if not actor.is_privileged and not (is_owner and ALLOW_OWNER_DIRECT_DELETE):
            raise ForbiddenError("Sem permissão para deletar esta assinatura")
        return SignatureService.remove(session, signature)

    @staticmethod
    def remove(session: Session, signature: Signature) -> List[str]:
        """
        Purges the attachment objects from storage and then deletes the row.
        Storage failures are returned, never raised; the row is always deleted.
        """
        paths = [a.storage_path for a in signature.attachments]
        errors = storage.delete_objects(paths)
        if errors:
            logger.warning(
                "Signature #%s: %d attachment object(s) left in storage", signature.incremental_id, len(errors)
            )
        incremental_id = signature.incremental_id
        session.delete(signature)
        session.commit()
        logger.info("Signature #%s deleted", incremental_id)
        return errors

    @staticmethod
    def get_tokens() -> List[str]:
        return list(ALLOWED_SIGNATURE_TOKENS)

    @staticmethod
    def get_servers(session: Session) -> List[str]:
        rows = session.query(Signature.server_name).distinct().order_by(Signature.server_name.asc()).all()
        return [row[0] for row in rows]
