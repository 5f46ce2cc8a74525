from .sector import Sector
from .user import User, UserRole, PRIVILEGED_ROLES

__all__ = ['Sector', 'User', 'UserRole', 'PRIVILEGED_ROLES']
