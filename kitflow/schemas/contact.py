"""Vendor and service provider schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from kitflow.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema


# ==================== Vendors ====================

class VendorCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255)
    organization: str = Field(..., min_length=1, max_length=255)
    contact: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    material_type: Optional[str] = Field(None, max_length=100)


class VendorUpdate(BaseUpdateSchema):
    non_nullable_fields = ("name", "organization", "contact")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    organization: Optional[str] = Field(None, min_length=1, max_length=255)
    contact: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    material_type: Optional[str] = Field(None, max_length=100)


class VendorResponse(BaseResponseSchema):
    id: UUID
    name: str
    organization: str
    contact: str
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    material_type: Optional[str] = None
    created_at: datetime


# ==================== Service Providers ====================

class ServiceProviderCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255)
    service_type: str = Field(..., min_length=1, max_length=100)
    contact: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class ServiceProviderUpdate(BaseUpdateSchema):
    non_nullable_fields = ("name", "service_type", "contact")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    service_type: Optional[str] = Field(None, min_length=1, max_length=100)
    contact: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class ServiceProviderResponse(BaseResponseSchema):
    id: UUID
    name: str
    service_type: str
    contact: str
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
