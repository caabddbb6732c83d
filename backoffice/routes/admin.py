# backoffice/routes/admin.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.security import require_admin
from backoffice.dependencies import get_db
from backoffice.schemas.admin import AdminCreate, AdminCreated, AdminRead, PermissionMap, PermissionUpdate
from backoffice.services.admin_service import AdminService
from backoffice.services.auth_service import CurrentUser
from backoffice.services.permission_service import PermissionService

router = APIRouter(prefix="/admin-privileges", tags=["admin privileges"])


@router.get("/admins", response_model=List[AdminRead])
async def list_admins(db: AsyncSession = Depends(get_db)):
    return [AdminRead.from_orm_model(admin) for admin in await AdminService(db).list_admins()]


@router.post("/admins", response_model=AdminCreated, status_code=status.HTTP_201_CREATED)
async def create_admin(
    data: AdminCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Provision a login identity, its admin record and the admin role."""
    user, admin = await AdminService(db).create_admin(data, actor=current_user)
    return AdminCreated(user_id=user.id, admin=AdminRead.from_orm_model(admin))


@router.post("/admins/{admin_id}/toggle-status", response_model=AdminRead)
async def toggle_admin_status(admin_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return AdminRead.from_orm_model(await AdminService(db).toggle_admin_status(admin_id))


@router.delete("/admins/{admin_id}")
async def delete_admin(admin_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    deleted_id = await AdminService(db).delete_admin(admin_id)
    return {"success": True, "id": str(deleted_id)}


@router.get("/admins/{admin_id}/permissions", response_model=PermissionMap)
async def get_permissions(admin_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    permissions = await PermissionService(db).get_permissions(admin_id)
    return PermissionMap(admin_id=admin_id, permissions=permissions)


@router.put("/admins/{admin_id}/permissions", response_model=PermissionMap)
async def set_permissions(
    admin_id: uuid.UUID,
    update: PermissionUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    permissions = await PermissionService(db).set_permissions(admin_id, update.permissions, actor=current_user)
    return PermissionMap(admin_id=admin_id, permissions=permissions)
