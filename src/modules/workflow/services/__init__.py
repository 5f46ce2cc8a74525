from .request_service import RequestService

__all__ = ['RequestService']
