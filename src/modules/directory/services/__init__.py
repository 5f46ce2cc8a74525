from .sector_service import SectorService
from .user_service import UserService

__all__ = ['SectorService', 'UserService']
