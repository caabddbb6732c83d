"""
Schemas for admin management, provisioning and section permissions.
"""

import uuid
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from backoffice.core.enums import AdminStatus, AppSection
from backoffice.schemas.base import BaseSchema, TimestampedSchema, clean_text


class AdminRead(TimestampedSchema):
    id: uuid.UUID
    admin_code: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    status: AdminStatus


class AdminCreate(BaseModel):
    """Provisioning request: a login identity plus its admin record."""
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=72)
    admin_code: str = Field(..., min_length=1, max_length=20, alias="adminCode")
    name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)

    model_config = {"populate_by_name": True}

    @field_validator('email', mode='before')
    @classmethod
    def normalise_email(cls, v):
        v = clean_text(v)
        if isinstance(v, str):
            v = v.lower()
            if "@" not in v:
                raise ValueError('Email address is invalid')
        return v

    @field_validator('admin_code', 'name', mode='before')
    @classmethod
    def strip_text(cls, v):
        return clean_text(v)

    @field_validator('phone', mode='before')
    @classmethod
    def blank_phone_is_none(cls, v):
        v = clean_text(v)
        return v or None


class AdminCreated(BaseModel):
    success: bool = True
    message: str = "Admin created successfully"
    user_id: uuid.UUID
    admin: AdminRead


class PermissionMap(BaseSchema):
    admin_id: uuid.UUID
    permissions: Dict[AppSection, bool]


class PermissionUpdate(BaseModel):
    permissions: Dict[AppSection, bool]


class WorkloadEntry(BaseSchema):
    admin_id: uuid.UUID
    admin_code: str
    count: int
