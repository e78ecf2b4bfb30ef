"""
Doctor endpoints for API v1.

Reads require ``getDoctors``; everything that changes a doctor,
including attaching and detaching health services, requires
``manageDoctors``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from clinic_directory_api.app.api.deps import get_services
from clinic_directory_api.app.core.security import require_permission
from clinic_directory_api.app.schemas.common import ID_PATTERN
from clinic_directory_api.app.schemas.doctor import (
    DoctorCreate,
    DoctorHealthServiceLink,
    DoctorRead,
    DoctorUpdate,
)
from clinic_directory_api.app.services import ServiceRegistry

router = APIRouter()


@router.post("/", response_model=DoctorRead, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    doctor_in: DoctorCreate,
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageDoctors")),
) -> DoctorRead:
    return await services.doctors.create_doctor(doctor_in)


@router.get("/", response_model=List[DoctorRead])
async def list_doctors(
    name: Optional[str] = Query(None),
    clinics: Optional[str] = Query(None, pattern=ID_PATTERN, description="Clinic id"),
    health_services: Optional[str] = Query(
        None, alias="healthServices", pattern=ID_PATTERN, description="Health service id"
    ),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    sort_by: str = Query("id"),
    order: str = Query("asc"),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("getDoctors")),
) -> List[DoctorRead]:
    filters = {}
    if name is not None:
        filters["name"] = name
    if clinics is not None:
        filters["clinics"] = clinics
    if health_services is not None:
        filters["health_services"] = health_services
    return await services.doctors.list_doctors(
        filters, limit=limit, offset=offset, sort_by=sort_by, order=order
    )


@router.get("/{doctor_id}", response_model=DoctorRead)
async def get_doctor(
    doctor_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("getDoctors")),
) -> DoctorRead:
    doctor = await services.doctors.get_doctor(doctor_id)
    if doctor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    return doctor


@router.patch("/{doctor_id}", response_model=DoctorRead)
async def update_doctor(
    doctor_in: DoctorUpdate,
    doctor_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageDoctors")),
) -> DoctorRead:
    return await services.doctors.update_doctor(doctor_id, doctor_in)


@router.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_doctor(
    doctor_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageDoctors")),
) -> None:
    """Delete a doctor; each of its clinics recomputes its health services."""
    await services.doctors.delete_doctor(doctor_id)
    return None


@router.post("/healthService/{doctor_id}", response_model=DoctorRead)
async def add_health_service_to_doctor(
    link: DoctorHealthServiceLink,
    doctor_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageDoctors")),
) -> DoctorRead:
    return await services.doctors.add_health_service(link.health_service_id, doctor_id)


@router.delete("/healthService/{doctor_id}", response_model=DoctorRead)
async def remove_health_service_from_doctor(
    link: DoctorHealthServiceLink,
    doctor_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageDoctors")),
) -> DoctorRead:
    return await services.doctors.remove_health_service(link.health_service_id, doctor_id)
