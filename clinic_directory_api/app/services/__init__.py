"""
Service layer.

Each service encapsulates the business logic of one entity.  The three
services call each other during cascades, so they are created once by
:func:`build_services`, bound to each other through the narrow peer
protocols in ``peers.py`` and handed to the API layer as a
:class:`ServiceRegistry`.
"""

from dataclasses import dataclass
from typing import Optional

from ..core.documents import CLINICS, DOCTORS, HEALTH_SERVICES, DocumentStore
from .clinic_service import ClinicService
from .doctor_service import DoctorService
from .health_service_service import HealthServiceService


@dataclass(frozen=True)
class ServiceRegistry:
    clinics: ClinicService
    doctors: DoctorService
    health_services: HealthServiceService


def build_services(database_path: Optional[str] = None) -> ServiceRegistry:
    """Create the entity services for one database and wire their peers."""
    clinics = ClinicService(DocumentStore(database_path, CLINICS))
    doctors = DoctorService(DocumentStore(database_path, DOCTORS))
    health_services = HealthServiceService(DocumentStore(database_path, HEALTH_SERVICES))

    clinics.bind(doctors=doctors)
    doctors.bind(clinics=clinics, health_services=health_services)
    health_services.bind(clinics=clinics, doctors=doctors)
    return ServiceRegistry(clinics=clinics, doctors=doctors, health_services=health_services)


__all__ = [
    "ClinicService",
    "DoctorService",
    "HealthServiceService",
    "ServiceRegistry",
    "build_services",
]
