import io
import logging
import os
import re
from datetime import datetime
from typing import List

from PyPDF2 import PdfReader
from sqlalchemy.orm import Session

from config import MAX_ATTACHMENT_SIZE
from errors import ForbiddenError, NotFoundError, ValidationError
from modules.directory.models import User
from modules.signatures import storage
from modules.signatures.models import Attachment, Signature
from modules.signatures.services.signature_service import SignatureService

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "image/jpeg",
    "image/png",
    "image/gif",
    "text/plain",
}

class AttachmentService:

    @staticmethod
    def upload_attachment(
        session: Session,
        actor: User,
        signature_id: int,
        filename: str,
        content_type: str,
        file_contents: bytes,
    ) -> Attachment:
        signature = SignatureService.find_signature(session, signature_id)
        AttachmentService._check_access(actor, signature)
        AttachmentService._validate_file(filename, content_type, file_contents)

        timestamp = int(datetime.utcnow().timestamp() * 1000)
        storage_path = f"signatures/{signature.id}/{timestamp}-{AttachmentService._safe_name(filename)}"
        storage.put_bytes(storage_path, file_contents, content_type)

        attachment = Attachment(
            signature_id=signature.id,
            filename=filename,
            storage_path=storage_path,
            file_size=len(file_contents),
            mime_type=content_type,
        )
        session.add(attachment)
        session.commit()
        session.refresh(attachment)
        logger.info("Attachment %s uploaded to signature #%s", filename, signature.incremental_id)
        return attachment

    @staticmethod
    def list_attachments(session: Session, actor: User, signature_id: int) -> List[Attachment]:
        signature = SignatureService.find_signature(session, signature_id)
        AttachmentService._check_access(actor, signature)
        return list(signature.attachments)

    @staticmethod
    def get_attachment(session: Session, attachment_id: int) -> Attachment:
        attachment = session.get(Attachment, attachment_id)
        if not attachment:
            raise NotFoundError("Anexo não encontrado")
        return attachment

    @staticmethod
    def download_url(session: Session, actor: User, attachment_id: int) -> str:
        attachment = AttachmentService.get_attachment(session, attachment_id)
        AttachmentService._check_access(actor, attachment.signature)
        return storage.presigned_url(attachment.storage_path)

    @staticmethod
    def delete_attachment(session: Session, actor: User, attachment_id: int):
        attachment = AttachmentService.get_attachment(session, attachment_id)
        AttachmentService._check_access(actor, attachment.signature)

        # metadata is the source of truth; an orphaned object is acceptable
        storage.delete_objects([attachment.storage_path])
        session.delete(attachment)
        session.commit()
        logger.info("Attachment %s deleted", attachment_id)

    @staticmethod
    def _check_access(actor: User, signature: Signature):
        if signature.user_id != actor.id and not actor.is_privileged:
            raise ForbiddenError("Sem permissão para acessar os anexos desta assinatura")

    @staticmethod
    def _validate_file(filename: str, content_type: str, file_contents: bytes):
        if not filename:
            raise ValidationError("Nenhum arquivo enviado")
        if content_type not in ALLOWED_MIME_TYPES:
            raise ValidationError("Tipo de arquivo não permitido")
        if not file_contents:
            raise ValidationError("Arquivo vazio")
        if len(file_contents) > MAX_ATTACHMENT_SIZE:
            raise ValidationError(f"O tamanho máximo é {MAX_ATTACHMENT_SIZE // (1024 * 1024)} MB")

        if content_type == "application/pdf":
            try:
                reader = PdfReader(io.BytesIO(file_contents))
                _ = reader.pages
            except Exception:
                raise ValidationError("PDF inválido ou corrompido")

    @staticmethod
    def _safe_name(filename: str) -> str:
        base = os.path.basename(filename)
        return re.sub(r"[^\w.\-]", "_", base)
