"""
Request gates for the back office.

Two layers, both plain FastAPI dependencies:

- ``require_admin``: a live bearer session whose identity holds the admin role
  and whose admin record, if it has one, is not frozen.
- ``require_section(section)``: the caller's admin record is not denied the
  named section. No permission row, or no admin record, means allowed.

Usage:
    router = APIRouter(dependencies=[Depends(require_admin), Depends(require_section(AppSection.CPV))])
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import AppSection
from backoffice.core.exceptions import NotAuthenticatedError, NotAuthorizedError, SectionAccessDeniedError
from backoffice.dependencies import get_db
from backoffice.services.auth_service import AuthService, CurrentUser
from backoffice.services.permission_service import PermissionService

# auto_error=False so a missing header reaches our own 401/redirect handling
bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    service = AuthService(db)
    user = await service.get_session_user(token)
    if user is None:
        raise NotAuthenticatedError("Not authenticated")
    return await service.resolve_current_user(user)


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise NotAuthorizedError("Admin access required")
    if current_user.is_frozen:
        raise NotAuthorizedError("Admin account is frozen")
    return current_user


def require_section(section: AppSection):
    """Dependency factory enforcing per-section access on top of require_admin."""

    async def check_section(
        current_user: CurrentUser = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
    ) -> CurrentUser:
        if not await PermissionService(db).can_access(current_user.admin_id, section):
            raise SectionAccessDeniedError(section)
        return current_user

    check_section.__name__ = f"require_section_{section.name.lower()}"
    return check_section
