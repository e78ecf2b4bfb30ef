"""
Service layer for doctors.

A doctor's ``health_services`` set is authoritative: clinics derive
their own set from it.  Attaching a service therefore also unions it
into every clinic the doctor works at, while detaching a service or
deleting the doctor makes each affected clinic recompute its set.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Set

from ..core.documents import DocumentStore, Patch
from ..core.errors import NotFoundError
from ..schemas.doctor import DoctorCreate, DoctorRead, DoctorUpdate
from .common import require_name, unbound_peer
from .peers import ClinicPeer, HealthServicePeer


logger = logging.getLogger(__name__)

CLINIC_PAGE_SIZE = 500


class DoctorService:
    """Doctor CRUD plus the doctor side of both relationships."""

    def __init__(
        self,
        store: DocumentStore,
        clinics: Optional[ClinicPeer] = None,
        health_services: Optional[HealthServicePeer] = None,
    ) -> None:
        self.store = store
        self._clinics = clinics
        self._health_services = health_services

    def bind(self, clinics: ClinicPeer, health_services: HealthServicePeer) -> None:
        self._clinics = clinics
        self._health_services = health_services

    @property
    def clinics(self) -> ClinicPeer:
        if self._clinics is None:
            raise unbound_peer("DoctorService", "clinic")
        return self._clinics

    @property
    def health_services(self) -> HealthServicePeer:
        if self._health_services is None:
            raise unbound_peer("DoctorService", "health service")
        return self._health_services

    async def create_doctor(self, data: DoctorCreate) -> DoctorRead:
        document = self.store.insert_one({"name": require_name(data.name)})
        logger.info("Created doctor %s (%s)", document["id"], document["name"])
        return DoctorRead.model_validate(document)

    async def list_doctors(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
        sort_by: str = "id",
        order: str = "asc",
    ) -> List[DoctorRead]:
        documents = self.store.find(filters, limit=limit, offset=offset, sort_by=sort_by, order=order)
        return [DoctorRead.model_validate(document) for document in documents]

    async def get_doctor(self, doctor_id: str) -> Optional[DoctorRead]:
        document = self.store.find_by_id(doctor_id)
        return DoctorRead.model_validate(document) if document else None

    async def get_doctors_by_ids(self, doctor_ids: Iterable[str]) -> List[DoctorRead]:
        return [DoctorRead.model_validate(document) for document in self.store.find_by_ids(doctor_ids)]

    async def update_doctor(self, doctor_id: str, data: DoctorUpdate) -> DoctorRead:
        document = self.store.update_one(doctor_id, Patch.assign(name=require_name(data.name)))
        if document is None:
            raise NotFoundError("Doctor not found")
        logger.info("Updated doctor %s", doctor_id)
        return DoctorRead.model_validate(document)

    async def update_doctor_raw(self, doctor_id: str, patch: Patch) -> Optional[DoctorRead]:
        document = self.store.update_one(doctor_id, patch)
        return DoctorRead.model_validate(document) if document else None

    async def update_doctors_by_filter(self, filters: Mapping[str, Any], patch: Patch) -> int:
        modified = self.store.update_many(filters, patch)
        logger.debug("Bulk doctor update %s -> %d modified", dict(filters), modified)
        return modified

    async def _recompute_clinics(self, clinic_ids: Iterable[str]) -> None:
        # Ids that no longer resolve are dangling references left by an
        # interrupted clinic deletion; there is nothing to recompute for them.
        for clinic in await self.clinics.get_clinics_by_ids(clinic_ids):
            await self.clinics.recompute_health_services(clinic.id)

    async def _clinics_listing(self, doctor_id: str) -> Set[str]:
        """Ids of every clinic whose ``doctors`` set contains ``doctor_id``."""
        clinic_ids: Set[str] = set()
        offset = 0
        while True:
            page = await self.clinics.list_clinics(
                {"doctors": doctor_id}, limit=CLINIC_PAGE_SIZE, offset=offset
            )
            clinic_ids.update(clinic.id for clinic in page)
            if len(page) < CLINIC_PAGE_SIZE:
                return clinic_ids
            offset += CLINIC_PAGE_SIZE

    async def delete_doctor(self, doctor_id: str) -> DoctorRead:
        """Remove the doctor from its clinics, recompute them, then delete it.

        The doctor is pulled out of every clinic's ``doctors`` set before the
        recomputation so its services no longer contribute.  Clinics listing
        the doctor without the doctor listing them back are recomputed too.
        """
        doctor = await self.get_doctor(doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")

        affected = await self._clinics_listing(doctor_id) | doctor.clinics
        detached = await self.clinics.update_clinics_by_filter(
            {"doctors": doctor_id}, Patch.remove("doctors", doctor_id)
        )
        logger.debug("Detached doctor %s from %d clinics", doctor_id, detached)
        await self._recompute_clinics(affected)
        self.store.delete_one(doctor_id)
        logger.info("Deleted doctor %s", doctor_id)
        return doctor

    async def add_health_service(self, health_service_id: str, doctor_id: str) -> DoctorRead:
        """Attach a health service to a doctor and to each of the doctor's clinics."""
        if await self.health_services.get_health_service(health_service_id) is None:
            raise NotFoundError("HealthService not found")
        if await self.get_doctor(doctor_id) is None:
            raise NotFoundError("Doctor not found")

        await self.clinics.update_clinics_by_filter(
            {"doctors": doctor_id}, Patch.add("health_services", health_service_id)
        )
        document = self.store.update_one(doctor_id, Patch.add("health_services", health_service_id))
        if document is None:
            raise NotFoundError("Doctor not found")
        logger.info("Added health service %s to doctor %s", health_service_id, doctor_id)
        return DoctorRead.model_validate(document)

    async def remove_health_service(self, health_service_id: str, doctor_id: str) -> DoctorRead:
        """Detach a health service from a doctor and recompute the doctor's clinics.

        Clinics are recomputed rather than having the id pulled because
        another doctor of the same clinic may still provide the service.
        """
        if await self.health_services.get_health_service(health_service_id) is None:
            raise NotFoundError("HealthService not found")
        if await self.get_doctor(doctor_id) is None:
            raise NotFoundError("Doctor not found")

        document = self.store.update_one(doctor_id, Patch.remove("health_services", health_service_id))
        if document is None:
            raise NotFoundError("Doctor not found")
        updated = DoctorRead.model_validate(document)
        await self._recompute_clinics(updated.clinics)
        logger.info("Removed health service %s from doctor %s", health_service_id, doctor_id)
        return updated
