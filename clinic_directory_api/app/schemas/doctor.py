"""
Pydantic models for doctors.

A doctor's ``healthServices`` set is the source every clinic derives its
own from; it is changed through the health service link routes.
"""

from typing import Optional, Set

from pydantic import BaseModel, Field

from .common import EntityId, Name


class DoctorCreate(BaseModel):
    """Schema for creating a doctor."""

    name: Name = Field(..., examples=["John Doe"])


class DoctorUpdate(BaseModel):
    """Schema for renaming a doctor."""

    name: Name = Field(..., examples=["Jane Doe"])


class DoctorHealthServiceLink(BaseModel):
    """Body of the add/remove health service routes."""

    health_service_id: EntityId = Field(..., alias="healthServiceId")

    model_config = {"populate_by_name": True}


class DoctorRead(BaseModel):
    """Schema for reading a doctor."""

    id: str
    name: str
    clinics: Set[str] = Field(default_factory=set)
    health_services: Set[str] = Field(default_factory=set, alias="healthServices")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }
