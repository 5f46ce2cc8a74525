import logging
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from modules.chat.repositories import ChatRepository
from modules.chat.services import ChatService, RequestDecisionMessage
from modules.directory.models import User
from modules.signatures.models import Signature
from modules.signatures.services import SignatureService
from modules.workflow.models import Request, RequestStatus, RequestType
from modules.workflow.schemas import EditPermission

logger = logging.getLogger(__name__)

DECISIONS = (RequestStatus.APPROVED, RequestStatus.REJECTED)

class RequestService:

    @staticmethod
    def create_request(
        session: Session,
        actor: User,
        request_type: Union[str, RequestType],
        signature_id: int,
        reason: str,
    ) -> Request:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Motivo é obrigatório")
        request_type = RequestService._parse_type(request_type)

        signature = SignatureService.find_signature(session, signature_id)
        if signature.user_id != actor.id:
            raise ForbiddenError("Apenas o proprietário da assinatura pode criar solicitações")

        if RequestService._pending_for(session, signature.id) is not None:
            raise ConflictError("Já existe uma solicitação pendente para esta assinatura")

        request = Request(
            type=request_type,
            status=RequestStatus.PENDING,
            reason=reason,
            user_id=actor.id,
            signature_id=signature.id,
        )
        session.add(request)
        try:
            session.commit()
        except IntegrityError:
            # lost the race against a concurrent creation
            session.rollback()
            raise ConflictError("Já existe uma solicitação pendente para esta assinatura")
        session.refresh(request)
        logger.info(
            "%s request %s created by %s for signature #%s",
            request.type.value, request.id, actor.username, signature.incremental_id
        )
        return request

    @staticmethod
    def query_requests(session: Session, actor: User, status: Optional[Union[str, RequestStatus]] = None):
        query = session.query(Request)
        if not actor.is_privileged:
            query = query.filter(Request.user_id == actor.id)
        if status:
            try:
                query = query.filter(Request.status == RequestStatus(status))
            except ValueError:
                raise ValidationError("Status inválido")
        return query.order_by(Request.created_at.desc(), Request.id.desc())

    @staticmethod
    def get_request(session: Session, actor: User, request_id: int) -> Request:
        request = session.get(Request, request_id)
        if not request:
            raise NotFoundError("Solicitação não encontrada")
        if request.user_id != actor.id and not actor.is_privileged:
            raise ForbiddenError("Sem permissão para acessar esta solicitação")
        return request

    @staticmethod
    def adjudicate(
        session: Session,
        actor: User,
        request_id: int,
        decision: Union[str, RequestStatus],
        admin_response: Optional[str] = None,
    ) -> Request:
        """
        Approves or rejects a PENDING request.

        The status change is a single conditional UPDATE, so only one
        adjudication can ever win. An approved DELETE removes the signature,
        its attachments and, by cascade, the request itself; in that case the
        returned Request is a detached snapshot of the removed row.
        """
        if not actor.is_privileged:
            raise ForbiddenError("Apenas administradores e suporte podem responder solicitações")
        try:
            decision = RequestStatus(decision)
        except ValueError:
            decision = None
        if decision not in DECISIONS:
            raise ValidationError("Status deve ser APPROVED ou REJECTED")
        admin_response = (admin_response or "").strip() or None

        request = session.get(Request, request_id)
        if not request:
            raise NotFoundError("Solicitação não encontrada")

        updated = (
            session.query(Request)
            .filter(Request.id == request_id, Request.status == RequestStatus.PENDING)
            .update(
                {
                    "status": decision,
                    "admin_response": admin_response,
                    "responded_by_id": actor.id,
                    "updated_at": datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )
        if updated == 0:
            session.rollback()
            raise ConflictError("Esta solicitação já foi processada")
        session.commit()
        session.refresh(request)

        signature = request.signature
        notice = RequestDecisionMessage(
            from_user_id=str(actor.id),
            to_user_id=str(request.user_id),
            request_type=request.type.value,
            approved=decision == RequestStatus.APPROVED,
            incremental_id=signature.incremental_id if signature else None,
            admin_response=admin_response,
        )
        logger.info("Request %s %s by %s", request.id, decision.value, actor.username)

        result = request
        if decision == RequestStatus.APPROVED and request.type == RequestType.DELETE and signature:
            result = RequestService._snapshot(request)
            SignatureService.remove(session, signature)

        ChatService(ChatRepository(session)).send_template(notice)
        return result

    @staticmethod
    def can_edit(session: Session, actor: User, signature_id: int) -> EditPermission:
        signature = SignatureService.find_signature(session, signature_id)
        if actor.is_privileged:
            return EditPermission(can_edit=True, reason="Usuário com permissão administrativa")
        if signature.user_id != actor.id:
            return EditPermission(can_edit=False, reason="Você não é o proprietário desta assinatura")

        grant = RequestService._latest_edit_request(session, actor, signature.id, RequestStatus.APPROVED)
        if grant is not None:
            return EditPermission(
                can_edit=True,
                reason="Solicitação de edição aprovada",
                request_id=grant.id,
                approved_at=grant.updated_at,
            )

        latest = RequestService._latest_edit_request(session, actor, signature.id)
        if latest is None:
            return EditPermission(can_edit=False, reason="Nenhuma solicitação de edição encontrada")
        reasons = {
            RequestStatus.PENDING: "Solicitação de edição aguardando aprovação",
            RequestStatus.REJECTED: "Solicitação de edição rejeitada",
            RequestStatus.CONSUMED: "A edição aprovada já foi utilizada",
        }
        return EditPermission(can_edit=False, reason=reasons[latest.status], request_id=latest.id)

    @staticmethod
    def apply_approved_edit(session: Session, actor: User, signature_id: int, reason: str, token: str) -> Signature:
        """Edits a signature through an approved EDIT request, consuming the grant"""
        reason = (reason or "").strip()
        token = (token or "").strip()
        if not reason or not token:
            raise ValidationError("Motivo e token são obrigatórios")

        signature = SignatureService.find_signature(session, signature_id)
        if actor.is_privileged:
            return SignatureService.write_fields(session, signature, reason, token)
        if signature.user_id != actor.id:
            raise ForbiddenError("Você não é o proprietário desta assinatura")

        grant = RequestService._latest_edit_request(session, actor, signature.id, RequestStatus.APPROVED)
        if grant is None:
            raise ForbiddenError("Nenhuma solicitação de edição aprovada")

        consumed = (
            session.query(Request)
            .filter(Request.id == grant.id, Request.status == RequestStatus.APPROVED)
            .update(
                {
                    "status": RequestStatus.CONSUMED,
                    "admin_response": f"Edição realizada em {datetime.now().strftime('%d/%m/%Y %H:%M:%S')}",
                    "updated_at": datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )
        if consumed == 0:
            session.rollback()
            raise ForbiddenError("Nenhuma solicitação de edição aprovada")

        # grant consumption and field update commit together
        signature = SignatureService.write_fields(session, signature, reason, token)
        logger.info("Edit grant %s consumed on signature #%s", grant.id, signature.incremental_id)
        return signature

    @staticmethod
    def _latest_edit_request(
        session: Session, actor: User, signature_id: int, status: Optional[RequestStatus] = None
    ) -> Optional[Request]:
        query = session.query(Request).filter(
            Request.signature_id == signature_id,
            Request.user_id == actor.id,
            Request.type == RequestType.EDIT,
        )
        if status is not None:
            query = query.filter(Request.status == status)
        return (
            query
            .order_by(Request.updated_at.desc(), Request.id.desc())
            .first()
        )

    @staticmethod
    def _pending_for(session: Session, signature_id: int) -> Optional[Request]:
        return (
            session.query(Request)
            .filter(Request.signature_id == signature_id, Request.status == RequestStatus.PENDING)
            .first()
        )

    @staticmethod
    def _parse_type(request_type: Union[str, RequestType]) -> RequestType:
        try:
            return RequestType(request_type)
        except ValueError:
            raise ValidationError("Tipo deve ser EDIT ou DELETE")

    @staticmethod
    def _snapshot(request: Request) -> Request:
        return Request(
            id=request.id,
            type=request.type,
            status=request.status,
            reason=request.reason,
            admin_response=request.admin_response,
            user_id=request.user_id,
            signature_id=request.signature_id,
            responded_by_id=request.responded_by_id,
            created_at=request.created_at,
            updated_at=request.updated_at,
        )
