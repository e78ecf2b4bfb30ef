"""Pydantic models for health services."""

from typing import Optional

from pydantic import BaseModel, Field

from .common import Name


class HealthServiceCreate(BaseModel):
    name: Name = Field(..., examples=["MRI"])


class HealthServiceUpdate(BaseModel):
    name: Name = Field(..., examples=["CT scan"])


class HealthServiceRead(BaseModel):
    id: str
    name: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {"from_attributes": True}
