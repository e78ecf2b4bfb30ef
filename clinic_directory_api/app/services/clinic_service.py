"""
Service layer for clinics.

Besides plain CRUD this service owns the derived ``health_services``
field of a clinic: it always equals the deduplicated union of the
health services of the doctors linked to the clinic.  Adding a doctor
only ever unions that doctor's services in.  Whenever a doctor leaves,
the set is rebuilt from scratch by :meth:`recompute_health_services`,
because another doctor of the same clinic may still provide a service.

Doctor records are reached only through the :class:`~.peers.DoctorPeer`
bound at start‑up.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from ..core.documents import DocumentStore, Patch
from ..core.errors import NotFoundError
from ..core.idsets import union_all
from ..schemas.clinic import ClinicCreate, ClinicRead, ClinicUpdate
from .common import require_name, unbound_peer
from .peers import DoctorPeer


logger = logging.getLogger(__name__)


class ClinicService:
    """Clinic CRUD plus the clinic side of the doctor relationship."""

    def __init__(self, store: DocumentStore, doctors: Optional[DoctorPeer] = None) -> None:
        self.store = store
        self._doctors = doctors

    def bind(self, doctors: DoctorPeer) -> None:
        self._doctors = doctors

    @property
    def doctors(self) -> DoctorPeer:
        if self._doctors is None:
            raise unbound_peer("ClinicService", "doctor")
        return self._doctors

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    async def create_clinic(self, data: ClinicCreate) -> ClinicRead:
        """Insert a clinic with no doctors and no health services."""
        document = self.store.insert_one({"name": require_name(data.name)})
        logger.info("Created clinic %s (%s)", document["id"], document["name"])
        return ClinicRead.model_validate(document)

    async def list_clinics(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
        sort_by: str = "id",
        order: str = "asc",
    ) -> List[ClinicRead]:
        documents = self.store.find(filters, limit=limit, offset=offset, sort_by=sort_by, order=order)
        return [ClinicRead.model_validate(document) for document in documents]

    async def get_clinic(self, clinic_id: str) -> Optional[ClinicRead]:
        document = self.store.find_by_id(clinic_id)
        return ClinicRead.model_validate(document) if document else None

    async def get_clinics_by_ids(self, clinic_ids: Iterable[str]) -> List[ClinicRead]:
        return [ClinicRead.model_validate(document) for document in self.store.find_by_ids(clinic_ids)]

    async def update_clinic(self, clinic_id: str, data: ClinicUpdate) -> ClinicRead:
        """Rename a clinic.  Relationship fields cannot be set this way."""
        document = self.store.update_one(clinic_id, Patch.assign(name=require_name(data.name)))
        if document is None:
            raise NotFoundError("Clinic not found")
        logger.info("Updated clinic %s", clinic_id)
        return ClinicRead.model_validate(document)

    async def update_clinic_raw(self, clinic_id: str, patch: Patch) -> Optional[ClinicRead]:
        """Apply a raw patch to one clinic; ``None`` if it does not exist."""
        document = self.store.update_one(clinic_id, patch)
        return ClinicRead.model_validate(document) if document else None

    async def update_clinics_by_filter(self, filters: Mapping[str, Any], patch: Patch) -> int:
        """Apply ``patch`` to every matching clinic and return how many changed."""
        modified = self.store.update_many(filters, patch)
        logger.debug("Bulk clinic update %s -> %d modified", dict(filters), modified)
        return modified

    async def delete_clinic(self, clinic_id: str) -> ClinicRead:
        """Detach the clinic from all of its doctors, then delete it."""
        clinic = await self.get_clinic(clinic_id)
        if clinic is None:
            raise NotFoundError("Clinic not found")
        detached = await self.doctors.update_doctors_by_filter(
            {"clinics": clinic_id}, Patch.remove("clinics", clinic_id)
        )
        logger.debug("Detached clinic %s from %d doctors", clinic_id, detached)
        self.store.delete_one(clinic_id)
        logger.info("Deleted clinic %s", clinic_id)
        return clinic

    # ------------------------------------------------------------------
    # Doctor relationship
    # ------------------------------------------------------------------
    async def recompute_health_services(self, clinic_id: str) -> ClinicRead:
        """Rebuild the clinic's health services from its current doctors.

        Idempotent: running it twice in a row stores the same set.
        """
        clinic = await self.get_clinic(clinic_id)
        if clinic is None:
            raise NotFoundError("Clinic not found")
        doctors = await self.doctors.get_doctors_by_ids(clinic.doctors)
        derived = union_all(doctor.health_services for doctor in doctors)
        document = self.store.update_one(clinic_id, Patch.assign(health_services=derived))
        if document is None:
            raise NotFoundError("Clinic not found")
        logger.debug("Recomputed clinic %s health services: %d", clinic_id, len(derived))
        return ClinicRead.model_validate(document)

    async def add_doctor(self, doctor_id: str, clinic_id: str) -> ClinicRead:
        """Link a doctor to a clinic and bring the doctor's services along."""
        doctor = await self.doctors.get_doctor(doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")
        if await self.get_clinic(clinic_id) is None:
            raise NotFoundError("Clinic not found")

        await self.doctors.update_doctor_raw(doctor_id, Patch.add("clinics", clinic_id))
        document = self.store.update_one(
            clinic_id,
            Patch(add_ids={"doctors": {doctor_id}, "health_services": set(doctor.health_services)}),
        )
        if document is None:
            raise NotFoundError("Clinic not found")
        logger.info("Added doctor %s to clinic %s", doctor_id, clinic_id)
        return ClinicRead.model_validate(document)

    async def remove_doctor(self, doctor_id: str, clinic_id: str) -> ClinicRead:
        """Unlink a doctor from a clinic and recompute the clinic's services."""
        if await self.doctors.get_doctor(doctor_id) is None:
            raise NotFoundError("Doctor not found")
        if await self.get_clinic(clinic_id) is None:
            raise NotFoundError("Clinic not found")

        await self.doctors.update_doctor_raw(doctor_id, Patch.remove("clinics", clinic_id))
        self.store.update_one(clinic_id, Patch.remove("doctors", doctor_id))
        logger.info("Removed doctor %s from clinic %s", doctor_id, clinic_id)
        return await self.recompute_health_services(clinic_id)
