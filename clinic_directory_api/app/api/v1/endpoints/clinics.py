"""
Clinic endpoints for API v1.

Any authenticated role may read clinics; only roles granting
``manageClinics`` may create, rename or delete them and change which
doctors work there.  A clinic's health services cannot be edited
directly: they follow its doctors, and the ``recompute`` route rebuilds
them after an interrupted cascade.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from clinic_directory_api.app.api.deps import get_services
from clinic_directory_api.app.core.security import require_permission
from clinic_directory_api.app.schemas.clinic import ClinicCreate, ClinicDoctorLink, ClinicRead, ClinicUpdate
from clinic_directory_api.app.schemas.common import ID_PATTERN
from clinic_directory_api.app.services import ServiceRegistry

router = APIRouter()


@router.post("/", response_model=ClinicRead, status_code=status.HTTP_201_CREATED)
async def create_clinic(
    clinic_in: ClinicCreate,
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageClinics")),
) -> ClinicRead:
    """Create a clinic with no doctors."""
    return await services.clinics.create_clinic(clinic_in)


@router.get("/", response_model=List[ClinicRead])
async def list_clinics(
    name: Optional[str] = Query(None),
    doctors: Optional[str] = Query(None, pattern=ID_PATTERN, description="Doctor id"),
    health_services: Optional[str] = Query(
        None, alias="healthServices", pattern=ID_PATTERN, description="Health service id"
    ),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    sort_by: str = Query("id"),
    order: str = Query("asc"),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("getClinics")),
) -> List[ClinicRead]:
    """List clinics, optionally only those with a given name, doctor or service."""
    filters = {}
    if name is not None:
        filters["name"] = name
    if doctors is not None:
        filters["doctors"] = doctors
    if health_services is not None:
        filters["health_services"] = health_services
    return await services.clinics.list_clinics(
        filters, limit=limit, offset=offset, sort_by=sort_by, order=order
    )


@router.get("/{clinic_id}", response_model=ClinicRead)
async def get_clinic(
    clinic_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("getClinics")),
) -> ClinicRead:
    clinic = await services.clinics.get_clinic(clinic_id)
    if clinic is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Clinic not found")
    return clinic


@router.patch("/{clinic_id}", response_model=ClinicRead)
async def update_clinic(
    clinic_in: ClinicUpdate,
    clinic_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageClinics")),
) -> ClinicRead:
    return await services.clinics.update_clinic(clinic_id, clinic_in)


@router.delete("/{clinic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_clinic(
    clinic_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageClinics")),
) -> None:
    """Delete a clinic after removing it from every doctor."""
    await services.clinics.delete_clinic(clinic_id)
    return None


@router.post("/doctor/{clinic_id}", response_model=ClinicRead)
async def add_doctor_to_clinic(
    link: ClinicDoctorLink,
    clinic_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageClinics")),
) -> ClinicRead:
    """Add a doctor to the clinic; the doctor's services join the clinic's."""
    return await services.clinics.add_doctor(link.doctor_id, clinic_id)


@router.delete("/doctor/{clinic_id}", response_model=ClinicRead)
async def remove_doctor_from_clinic(
    link: ClinicDoctorLink,
    clinic_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageClinics")),
) -> ClinicRead:
    """Remove a doctor from the clinic and recompute the clinic's services."""
    return await services.clinics.remove_doctor(link.doctor_id, clinic_id)


@router.post("/{clinic_id}/healthServices/recompute", response_model=ClinicRead)
async def recompute_clinic_health_services(
    clinic_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageClinics")),
) -> ClinicRead:
    """Rebuild the clinic's health services from its current doctors."""
    return await services.clinics.recompute_health_services(clinic_id)
