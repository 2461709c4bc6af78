"""
Base Schema Classes for Pydantic Models

RULE: All response schemas that read from ORM models MUST inherit from
BaseResponseSchema.
"""

from typing import ClassVar, Tuple
from uuid import UUID
from pydantic import BaseModel, ConfigDict, model_validator


class BaseResponseSchema(BaseModel):
    """
    Base class for all response schemas that read from ORM models.

    Usage:
        class ClientResponse(BaseResponseSchema):
            id: UUID
            name: str
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """
    Base class for create/input schemas.

    Unknown fields are ignored so older clients keep working.
    """
    model_config = ConfigDict(
        extra='ignore',
    )


class BaseUpdateSchema(BaseModel):
    """
    Base class for update/patch schemas.

    All fields are optional; only fields sent by the caller are applied
    (``model_dump(exclude_unset=True)``). Fields listed in
    ``non_nullable_fields`` back NOT NULL columns: they may be omitted but
    not sent as null.
    """
    model_config = ConfigDict(
        extra='ignore',
    )

    non_nullable_fields: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode='after')
    def reject_explicit_nulls(self):
        nulls = [
            name for name in self.non_nullable_fields
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class DeleteResponse(BaseModel):
    """Acknowledgement for a deleted record."""
    id: UUID
    deleted: bool = True
