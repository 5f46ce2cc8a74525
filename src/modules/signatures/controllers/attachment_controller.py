from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import get_current_user
from modules.directory.models import User
from modules.signatures.schemas import AttachmentResponse
from modules.signatures.services import AttachmentService

router = APIRouter(tags=["attachments"])

@router.post("/signatures/{signature_id}/attachments", status_code=status.HTTP_201_CREATED)
async def upload_attachment(
    signature_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contents = await file.read()
    attachment = AttachmentService.upload_attachment(
        db, current_user, signature_id, file.filename, file.content_type, contents
    )
    return {
        "success": True,
        "data": {"attachment": AttachmentResponse.model_validate(attachment)},
        "message": "Anexo enviado com sucesso",
    }

@router.get("/signatures/{signature_id}/attachments")
def list_attachments(
    signature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    attachments = AttachmentService.list_attachments(db, current_user, signature_id)
    return {"success": True, "data": {"attachments": [AttachmentResponse.model_validate(a) for a in attachments]}}

@router.get("/attachments/{attachment_id}/download")
def download_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    url = AttachmentService.download_url(db, current_user, attachment_id)
    return {"success": True, "data": {"url": url}}

@router.delete("/attachments/{attachment_id}")
def delete_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    AttachmentService.delete_attachment(db, current_user, attachment_id)
    return {"success": True, "message": "Anexo deletado com sucesso"}
