"""
Schemas for login sessions.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from backoffice.schemas.base import clean_text


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator('email', mode='before')
    @classmethod
    def normalise_email(cls, v):
        v = clean_text(v)
        return v.lower() if isinstance(v, str) else v


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: uuid.UUID


class SessionInfo(BaseModel):
    user_id: uuid.UUID
    email: str
    is_admin: bool
    admin_id: Optional[uuid.UUID] = None
    admin_code: Optional[str] = None
