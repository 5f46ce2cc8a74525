from .request_schemas import RequestCreate, AdjudicateRequest, RequestResponse, EditPermission

__all__ = ['RequestCreate', 'AdjudicateRequest', 'RequestResponse', 'EditPermission']
