"""
Health service endpoints for API v1.

Reads require ``getHealthServices`` and writes ``manageHealthServices``.
Creating or renaming to a name that is already taken answers 400.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from clinic_directory_api.app.api.deps import get_services
from clinic_directory_api.app.core.security import require_permission
from clinic_directory_api.app.schemas.common import ID_PATTERN
from clinic_directory_api.app.schemas.health_service import (
    HealthServiceCreate,
    HealthServiceRead,
    HealthServiceUpdate,
)
from clinic_directory_api.app.services import ServiceRegistry

router = APIRouter()


@router.post("/", response_model=HealthServiceRead, status_code=status.HTTP_201_CREATED)
async def create_health_service(
    health_service_in: HealthServiceCreate,
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageHealthServices")),
) -> HealthServiceRead:
    return await services.health_services.create_health_service(health_service_in)


@router.get("/", response_model=List[HealthServiceRead])
async def list_health_services(
    name: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    sort_by: str = Query("id"),
    order: str = Query("asc"),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("getHealthServices")),
) -> List[HealthServiceRead]:
    filters = {"name": name} if name is not None else {}
    return await services.health_services.list_health_services(
        filters, limit=limit, offset=offset, sort_by=sort_by, order=order
    )


@router.get("/{health_service_id}", response_model=HealthServiceRead)
async def get_health_service(
    health_service_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("getHealthServices")),
) -> HealthServiceRead:
    health_service = await services.health_services.get_health_service(health_service_id)
    if health_service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="HealthService not found")
    return health_service


@router.patch("/{health_service_id}", response_model=HealthServiceRead)
async def update_health_service(
    health_service_in: HealthServiceUpdate,
    health_service_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageHealthServices")),
) -> HealthServiceRead:
    return await services.health_services.update_health_service(health_service_id, health_service_in)


@router.delete("/{health_service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_health_service(
    health_service_id: str = Path(..., pattern=ID_PATTERN),
    services: ServiceRegistry = Depends(get_services),
    current_user: dict = Depends(require_permission("manageHealthServices")),
) -> None:
    """Delete a health service and purge it from every clinic and doctor."""
    await services.health_services.delete_health_service(health_service_id)
    return None
