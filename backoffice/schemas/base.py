"""
Base schemas with common functionality.
"""
from datetime import datetime
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar('T', bound='BaseSchema')


class BaseSchema(BaseModel):
    """Base schema with common functionality for all schemas"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True
    )

    @classmethod
    def from_orm_model(cls: Type[T], orm_model: Any) -> T:
        """Create a schema instance from an ORM model"""
        return cls.model_validate(orm_model)


class TimestampedSchema(BaseSchema):
    """Base schema for rows carrying a creation timestamp"""
    created_at: Optional[datetime] = None


def clean_text(value: Any) -> Any:
    """Trim strings; leave anything else for the field type to reject."""
    if isinstance(value, str):
        return value.strip()
    return value
