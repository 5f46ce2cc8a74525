from .signature_schemas import SignatureCreate, SignatureUpdate, SignatureResponse, AttachmentResponse

__all__ = ['SignatureCreate', 'SignatureUpdate', 'SignatureResponse', 'AttachmentResponse']
