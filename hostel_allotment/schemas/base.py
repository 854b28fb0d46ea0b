# --- File: hostel_allotment/schemas/base.py ---
"""
Base schema classes with common configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

__all__ = [
    "BaseSchema",
    "BaseRecord",
    "BaseCreateSchema",
    "BaseFilterSchema",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All application-facing schemas inherit from this to ensure consistent
    behaviour (attribute loading, enum handling, whitespace stripping).
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        # Keep enums as Enum instances; callers can still access `.value`.
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class BaseRecord(BaseSchema):
    """
    A row as returned by a persistence backend.

    Backends build records from ORM instances or JSON objects alike, so
    columns a record does not declare are ignored.
    """

    model_config = ConfigDict(extra="ignore")


class BaseCreateSchema(BaseSchema):
    """Base schema for create operations."""
    pass


class BaseFilterSchema(BaseSchema):
    """Base schema for filter parameters."""
    pass
