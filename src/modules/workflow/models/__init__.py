from .request import Request, RequestType, RequestStatus

__all__ = ['Request', 'RequestType', 'RequestStatus']
