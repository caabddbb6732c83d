"""
Schemas for categories and brands.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from backoffice.schemas.base import BaseSchema, TimestampedSchema, clean_text

NAME_MAX_LENGTH = 100


class CatalogEntryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, v):
        return clean_text(v)


class CatalogEntryRead(TimestampedSchema):
    id: uuid.UUID
    name: str


class CatalogEntryStats(BaseSchema):
    id: uuid.UUID
    name: str
    listing_count: int


class CatalogDeleteResult(BaseSchema):
    id: uuid.UUID
    deleted: bool = True
    reassigned: int = 0
    replacement_id: Optional[uuid.UUID] = None
