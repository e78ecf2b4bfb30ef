"""
Service layer for health services.

Names are unique; the store's unique index enforces it and a violation
is reported as a :class:`~..core.errors.ValidationError`.  Deleting a
health service purges its id from every clinic and doctor directly.
No recomputation is needed since the id no longer exists anywhere to be
derived from.
"""

import logging
from typing import Any, List, Mapping, Optional

from ..core.documents import DocumentStore, Patch
from ..core.errors import DuplicateKeyError, NotFoundError, ValidationError
from ..schemas.health_service import HealthServiceCreate, HealthServiceRead, HealthServiceUpdate
from .common import require_name, unbound_peer
from .peers import ClinicPeer, DoctorPeer


logger = logging.getLogger(__name__)


class HealthServiceService:
    """Health service CRUD and reference cleanup on deletion."""

    def __init__(
        self,
        store: DocumentStore,
        clinics: Optional[ClinicPeer] = None,
        doctors: Optional[DoctorPeer] = None,
    ) -> None:
        self.store = store
        self._clinics = clinics
        self._doctors = doctors

    def bind(self, clinics: ClinicPeer, doctors: DoctorPeer) -> None:
        self._clinics = clinics
        self._doctors = doctors

    @property
    def clinics(self) -> ClinicPeer:
        if self._clinics is None:
            raise unbound_peer("HealthServiceService", "clinic")
        return self._clinics

    @property
    def doctors(self) -> DoctorPeer:
        if self._doctors is None:
            raise unbound_peer("HealthServiceService", "doctor")
        return self._doctors

    async def create_health_service(self, data: HealthServiceCreate) -> HealthServiceRead:
        name = require_name(data.name)
        try:
            document = self.store.insert_one({"name": name})
        except DuplicateKeyError as exc:
            raise ValidationError("Name already taken") from exc
        logger.info("Created health service %s (%s)", document["id"], name)
        return HealthServiceRead.model_validate(document)

    async def list_health_services(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
        sort_by: str = "id",
        order: str = "asc",
    ) -> List[HealthServiceRead]:
        documents = self.store.find(filters, limit=limit, offset=offset, sort_by=sort_by, order=order)
        return [HealthServiceRead.model_validate(document) for document in documents]

    async def get_health_service(self, health_service_id: str) -> Optional[HealthServiceRead]:
        document = self.store.find_by_id(health_service_id)
        return HealthServiceRead.model_validate(document) if document else None

    async def update_health_service(
        self, health_service_id: str, data: HealthServiceUpdate
    ) -> HealthServiceRead:
        try:
            document = self.store.update_one(health_service_id, Patch.assign(name=require_name(data.name)))
        except DuplicateKeyError as exc:
            raise ValidationError("Name already taken") from exc
        if document is None:
            raise NotFoundError("HealthService not found")
        logger.info("Updated health service %s", health_service_id)
        return HealthServiceRead.model_validate(document)

    async def update_health_services_by_filter(self, filters: Mapping[str, Any], patch: Patch) -> int:
        modified = self.store.update_many(filters, patch)
        logger.debug("Bulk health service update %s -> %d modified", dict(filters), modified)
        return modified

    async def delete_health_service(self, health_service_id: str) -> HealthServiceRead:
        """Strip the id from every clinic and doctor, then delete the record."""
        health_service = await self.get_health_service(health_service_id)
        if health_service is None:
            raise NotFoundError("HealthService not found")

        clinics = await self.clinics.update_clinics_by_filter(
            {"health_services": health_service_id}, Patch.remove("health_services", health_service_id)
        )
        doctors = await self.doctors.update_doctors_by_filter(
            {"health_services": health_service_id}, Patch.remove("health_services", health_service_id)
        )
        logger.debug(
            "Purged health service %s from %d clinics and %d doctors", health_service_id, clinics, doctors
        )
        self.store.delete_one(health_service_id)
        logger.info("Deleted health service %s", health_service_id)
        return health_service
