from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import require_permission
from modules.directory.models import User
from modules.exports.services import ExportService, XLSX_MEDIA_TYPE

router = APIRouter(prefix="/admin/backup", tags=["exports"])

def _download(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.get("/signatures")
def export_signatures(db: Session = Depends(get_db), current_user: User = Depends(require_permission("export"))):
    content, filename = ExportService.export_signatures(db)
    return _download(content, XLSX_MEDIA_TYPE, filename)

@router.get("/pdfs")
def export_pdfs(db: Session = Depends(get_db), current_user: User = Depends(require_permission("export"))):
    content, filename = ExportService.export_pdfs(db)
    return _download(content, "application/zip", filename)

@router.get("/{table}")
def export_table(table: str, db: Session = Depends(get_db), current_user: User = Depends(require_permission("export"))):
    content, filename = ExportService.export_table(db, table)
    return _download(content, XLSX_MEDIA_TYPE, filename)
