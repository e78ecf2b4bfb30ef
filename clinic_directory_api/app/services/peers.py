"""
Narrow interfaces the entity services use to reach each other.

Cascades need only a handful of operations from a peer, so each service
depends on one of these protocols instead of the peer's full class.  The
concrete services satisfy them structurally and are bound together in
:func:`~.build_services`.
"""

from typing import Any, Iterable, List, Mapping, Optional, Protocol

from ..core.documents import Patch
from ..schemas.clinic import ClinicRead
from ..schemas.doctor import DoctorRead
from ..schemas.health_service import HealthServiceRead


class DoctorPeer(Protocol):
    async def get_doctor(self, doctor_id: str) -> Optional[DoctorRead]: ...

    async def get_doctors_by_ids(self, doctor_ids: Iterable[str]) -> List[DoctorRead]: ...

    async def update_doctor_raw(self, doctor_id: str, patch: Patch) -> Optional[DoctorRead]: ...

    async def update_doctors_by_filter(self, filters: Mapping[str, Any], patch: Patch) -> int: ...


class ClinicPeer(Protocol):
    async def list_clinics(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
        sort_by: str = "id",
        order: str = "asc",
    ) -> List[ClinicRead]: ...

    async def get_clinics_by_ids(self, clinic_ids: Iterable[str]) -> List[ClinicRead]: ...

    async def update_clinics_by_filter(self, filters: Mapping[str, Any], patch: Patch) -> int: ...

    async def recompute_health_services(self, clinic_id: str) -> ClinicRead: ...


class HealthServicePeer(Protocol):
    async def get_health_service(self, health_service_id: str) -> Optional[HealthServiceRead]: ...
