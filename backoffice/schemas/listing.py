"""
Schemas for listing pipeline endpoints.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from backoffice.core.enums import ListingStatus
from backoffice.schemas.base import BaseSchema, TimestampedSchema, clean_text

PRODUCT_NAME_MAX_LENGTH = 200
TITLE_MAX_LENGTH = 300
DESCRIPTION_MAX_LENGTH = 5000


class ListingCreate(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=PRODUCT_NAME_MAX_LENGTH)
    category_id: uuid.UUID
    brand_id: Optional[uuid.UUID] = None

    @field_validator('product_name', mode='before')
    @classmethod
    def strip_product_name(cls, v):
        return clean_text(v)


class ListingDetails(BaseModel):
    """Validation step payload (cpv -> assign)."""
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator('title', mode='before')
    @classmethod
    def strip_title(cls, v):
        return clean_text(v)

    @field_validator('description', mode='before')
    @classmethod
    def blank_description_is_none(cls, v):
        v = clean_text(v)
        if v == "":
            return None
        return v


class ListingAssign(BaseModel):
    admin_id: uuid.UUID


class PublishRequest(BaseModel):
    listing_ids: List[uuid.UUID] = Field(..., min_length=1)

    @field_validator('listing_ids')
    @classmethod
    def unique_ids(cls, v):
        # Preserve selection order, drop repeats
        return list(dict.fromkeys(v))


class ListingRead(TimestampedSchema):
    id: uuid.UUID
    product_name: str
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: uuid.UUID
    category_name: Optional[str] = None
    brand_id: Optional[uuid.UUID] = None
    brand_name: Optional[str] = None
    status: ListingStatus
    assigned_to: Optional[uuid.UUID] = None
    assignee_code: Optional[str] = None
    deleted_at: Optional[datetime] = None
    created_by: Optional[uuid.UUID] = None


class StageView(BaseSchema):
    status: ListingStatus
    label: str
    count: int
    listings: List[ListingRead]


class PublishResult(BaseSchema):
    published: int
    listings: List[ListingRead]


class PurgeResult(BaseSchema):
    id: uuid.UUID
    purged: bool = True
