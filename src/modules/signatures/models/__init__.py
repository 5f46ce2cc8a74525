from .signature import Signature
from .attachment import Attachment

__all__ = ['Signature', 'Attachment']
