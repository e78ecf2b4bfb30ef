"""
Top‑level router for version 1 of the API.

Aggregates the entity routers under their REST prefixes.
"""

from fastapi import APIRouter

from .endpoints import clinics, doctors, health_services

router = APIRouter()

router.include_router(clinics.router, prefix="/clinics", tags=["clinics"])
router.include_router(doctors.router, prefix="/doctors", tags=["doctors"])
router.include_router(health_services.router, prefix="/healthServices", tags=["healthServices"])
