"""
Pydantic models for clinics.

A clinic's ``doctors`` set is changed through the doctor link routes and
its ``healthServices`` set is derived from those doctors, so neither can
be written through ``ClinicCreate`` or ``ClinicUpdate``.
"""

from typing import Optional, Set

from pydantic import BaseModel, Field

from .common import EntityId, Name


class ClinicCreate(BaseModel):
    """Schema for creating a clinic."""

    name: Name = Field(..., examples=["Kyiv Vertebrology Clinic"])


class ClinicUpdate(BaseModel):
    """Schema for renaming a clinic."""

    name: Name = Field(..., examples=["Kyiv General Clinic"])


class ClinicDoctorLink(BaseModel):
    """Body of the add/remove doctor routes."""

    doctor_id: EntityId = Field(..., alias="doctorId")

    model_config = {"populate_by_name": True}


class ClinicRead(BaseModel):
    """Schema for reading a clinic."""

    id: str
    name: str
    doctors: Set[str] = Field(default_factory=set)
    health_services: Set[str] = Field(default_factory=set, alias="healthServices")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }
