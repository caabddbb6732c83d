from .activity_log import AdminActivityLog
from .admin import Admin, AdminPermission
from .auth import AuthUser, UserRole, AuthSession
from .catalog import Category, Brand
from .listing import Listing

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'AdminActivityLog',
    'Admin',
    'AdminPermission',
    'AuthUser',
    'UserRole',
    'AuthSession',
    'Category',
    'Brand',
    'Listing',
]
