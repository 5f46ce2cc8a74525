from .signature_service import SignatureService
from .attachment_service import AttachmentService, ALLOWED_MIME_TYPES

__all__ = ['SignatureService', 'AttachmentService', 'ALLOWED_MIME_TYPES']
