import io
import logging
import re
import zipfile
from datetime import datetime
from typing import Callable, Dict, List, Tuple

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from errors import AppError, NotFoundError, ValidationError
from modules.chat.models import ChatMessage, GUEST_PREFIX
from modules.directory.models import Sector, User
from modules.signatures import storage
from modules.signatures.models import Attachment, Signature
from modules.workflow.models import Request

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CHAT_EXPORT_LIMIT = 500
SUMMARY_FILENAME = "INFORMACOES_DO_EXPORT.txt"

Column = Tuple[str, Callable]

def _user_rows(session: Session):
    columns: List[Column] = [
        ("Username", lambda u: u.username),
        ("Nome", lambda u: u.name),
        ("Role", lambda u: u.role.value),
        ("Setor", lambda u: u.sector.name if u.sector else ""),
        ("Criado", lambda u: u.created_at),
    ]
    return columns, session.query(User).order_by(User.id.asc()).all()

def _sector_rows(session: Session):
    columns: List[Column] = [
        ("Nome", lambda s: s.name),
        ("Descrição", lambda s: s.description or ""),
        ("Total Usuários", lambda s: len(s.users)),
        ("Total Assinaturas", lambda s: len(s.signatures)),
    ]
    return columns, session.query(Sector).order_by(Sector.name.asc()).all()

def _signature_rows(session: Session):
    columns: List[Column] = [
        ("ID", lambda s: s.incremental_id),
        ("Motivo", lambda s: s.reason),
        ("Token", lambda s: s.token),
        ("Servidor", lambda s: s.server_name),
        ("Setor", lambda s: s.sector_name),
        ("Usuário", lambda s: s.user.name if s.user else ""),
        ("Criado", lambda s: s.created_at),
    ]
    return columns, session.query(Signature).order_by(Signature.incremental_id.asc()).all()

def _request_rows(session: Session):
    columns: List[Column] = [
        ("Tipo", lambda r: r.type.value),
        ("Status", lambda r: r.status.value),
        ("Motivo", lambda r: r.reason),
        ("Usuário", lambda r: r.user.name if r.user else ""),
        ("Assinatura", lambda r: r.signature.reason if r.signature else ""),
        ("Respondido por", lambda r: r.responded_by.name if r.responded_by else "N/A"),
        ("Criado", lambda r: r.created_at),
    ]
    return columns, session.query(Request).order_by(Request.created_at.asc()).all()

def _chat_rows(session: Session):
    names = {str(u.id): u.name for u in session.query(User).all()}

    def display(participant_id: str) -> str:
        if participant_id.startswith(GUEST_PREFIX):
            return f"Visitante ({participant_id[len(GUEST_PREFIX):]})"
        return names.get(participant_id, "N/A")

    columns: List[Column] = [
        ("De", lambda m: display(m.from_user_id)),
        ("Para", lambda m: display(m.to_user_id)),
        ("Mensagem", lambda m: m.message),
        ("Lida", lambda m: "Sim" if m.is_read else "Não"),
        ("Criado", lambda m: m.created_at),
    ]
    messages = (
        session.query(ChatMessage)
        .order_by(ChatMessage.created_at.desc())
        .limit(CHAT_EXPORT_LIMIT)
        .all()
    )
    return columns, messages

EXPORTABLE_TABLES: Dict[str, Callable] = {
    "users": _user_rows,
    "sectors": _sector_rows,
    "signatures": _signature_rows,
    "requests": _request_rows,
    "chat-messages": _chat_rows,
}

class ExportService:

    @staticmethod
    def export_table(session: Session, table: str) -> Tuple[bytes, str]:
        """Returns (xlsx bytes, download filename)"""
        if table not in EXPORTABLE_TABLES:
            raise ValidationError("Tabela não permitida")
        columns, rows = EXPORTABLE_TABLES[table](session)
        content = ExportService._workbook_bytes(table, columns, rows)
        logger.info("Exported %d row(s) from %s", len(rows), table)
        return content, f"{table}-{datetime.utcnow().strftime('%Y-%m-%d')}.xlsx"

    @staticmethod
    def export_signatures(session: Session) -> Tuple[bytes, str]:
        columns, rows = _signature_rows(session)
        columns = columns + [
            ("Username", lambda s: s.user.username if s.user else ""),
            ("Atualizado", lambda s: s.updated_at),
            ("Anexos", lambda s: len(s.attachments)),
        ]
        content = ExportService._workbook_bytes("Assinaturas", columns, rows)
        return content, f"assinaturas-{datetime.utcnow().strftime('%Y-%m-%d')}.xlsx"

    @staticmethod
    def export_pdfs(session: Session) -> Tuple[bytes, str]:
        attachments = (
            session.query(Attachment)
            .filter(Attachment.mime_type == "application/pdf")
            .order_by(Attachment.uploaded_at.desc())
            .all()
        )
        if not attachments:
            raise NotFoundError("Nenhum PDF encontrado no sistema")

        buffer = io.BytesIO()
        success_count = 0
        error_count = 0
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zout:
            for attachment in attachments:
                try:
                    data = storage.get_bytes(attachment.storage_path)
                except Exception:
                    logger.exception("Could not download %s", attachment.storage_path)
                    error_count += 1
                    continue
                zout.writestr(ExportService.pdf_entry_name(attachment), data)
                success_count += 1

            if success_count == 0:
                raise AppError("Nenhum PDF pôde ser processado com sucesso")
            zout.writestr(SUMMARY_FILENAME, ExportService._summary(success_count, error_count))

        logger.info("PDF export: %d file(s), %d error(s)", success_count, error_count)
        filename = f"PDFs_Assinaturas_{datetime.utcnow().strftime('%Y-%m-%dT%H-%M-%S')}.zip"
        return buffer.getvalue(), filename

    @staticmethod
    def pdf_entry_name(attachment: Attachment) -> str:
        signature = attachment.signature
        owner = signature.user.name if signature.user else signature.server_name
        folder = f"{signature.incremental_id}_{re.sub(r'[^a-zA-Z0-9]', '_', owner)}"
        safe_name = re.sub(r"[^a-zA-Z0-9.\-]", "_", attachment.filename)
        return f"{folder}/{attachment.uploaded_at.strftime('%Y-%m-%d')}_{safe_name}"

    @staticmethod
    def _summary(success_count: int, error_count: int) -> str:
        return (
            "RELATÓRIO DE EXPORT - PDFs DAS ASSINATURAS\n"
            "==========================================\n\n"
            f"Data de Export: {datetime.now().strftime('%d/%m/%Y %H:%M:%S')}\n"
            f"Total de PDFs Processados: {success_count}\n"
            f"Erros: {error_count}\n\n"
            "ESTRUTURA DOS ARQUIVOS:\n"
            "- Cada pasta representa uma assinatura (ID_NomeUsuario)\n"
            "- Formato dos arquivos: YYYY-MM-DD_NomeOriginal.pdf\n\n"
            "Este arquivo contém documentos sensíveis e deve ser tratado com confidencialidade.\n"
        )

    @staticmethod
    def _workbook_bytes(title: str, columns: List[Column], rows) -> bytes:
        wb = Workbook()
        ws = wb.active
        # sheet titles are limited to 31 chars
        ws.title = title[:31]
        ws.append([header for header, _ in columns])
        for row in rows:
            ws.append([getter(row) for _, getter in columns])
        for index in range(1, len(columns) + 1):
            ws.column_dimensions[get_column_letter(index)].width = 20

        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
