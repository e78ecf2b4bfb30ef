"""Tests for doctor CRUD and the doctor/health service relationship."""

import asyncio

import pytest

from clinic_directory_api.app.core.documents import Patch
from clinic_directory_api.app.core.errors import NotFoundError, StorageError
from clinic_directory_api.app.schemas.clinic import ClinicCreate
from clinic_directory_api.app.schemas.doctor import DoctorCreate, DoctorUpdate
from clinic_directory_api.app.schemas.health_service import HealthServiceCreate

MISSING_ID = "0" * 32


async def _setup(services):
    """One clinic with two doctors and three health services, none linked yet."""
    clinic = await services.clinics.create_clinic(ClinicCreate(name="C1"))
    first = await services.doctors.create_doctor(DoctorCreate(name="D1"))
    second = await services.doctors.create_doctor(DoctorCreate(name="D2"))
    await services.clinics.add_doctor(first.id, clinic.id)
    await services.clinics.add_doctor(second.id, clinic.id)
    h1, h2, h3 = [
        await services.health_services.create_health_service(HealthServiceCreate(name=name))
        for name in ("H1", "H2", "H3")
    ]
    return clinic, first, second, (h1.id, h2.id, h3.id)


def test_add_health_service_reaches_doctor_clinics(services):
    async def scenario():
        clinic, first, _, (h1, _, _) = await _setup(services)
        doctor = await services.doctors.add_health_service(h1, first.id)
        return doctor, await services.clinics.get_clinic(clinic.id), h1

    doctor, clinic, h1 = asyncio.run(scenario())
    assert doctor.health_services == {h1}
    assert clinic.health_services == {h1}


def test_remove_health_service_keeps_service_another_doctor_provides(services):
    async def scenario():
        clinic, first, second, (h1, h2, _) = await _setup(services)
        await services.doctors.add_health_service(h1, first.id)
        await services.doctors.add_health_service(h2, first.id)
        await services.doctors.add_health_service(h2, second.id)
        doctor = await services.doctors.remove_health_service(h2, first.id)
        after_shared = await services.clinics.get_clinic(clinic.id)
        await services.doctors.remove_health_service(h1, first.id)
        after_sole = await services.clinics.get_clinic(clinic.id)
        return doctor, after_shared, after_sole, h1, h2

    doctor, after_shared, after_sole, h1, h2 = asyncio.run(scenario())
    assert doctor.health_services == {h1}
    assert after_shared.health_services == {h1, h2}
    assert after_sole.health_services == {h2}


def test_add_health_service_unknown_entities(services):
    async def scenario():
        _, first, _, (h1, _, _) = await _setup(services)
        with pytest.raises(NotFoundError, match="HealthService not found"):
            await services.doctors.add_health_service(MISSING_ID, first.id)
        with pytest.raises(NotFoundError, match="Doctor not found"):
            await services.doctors.add_health_service(h1, MISSING_ID)
        with pytest.raises(NotFoundError, match="HealthService not found"):
            await services.doctors.remove_health_service(MISSING_ID, first.id)

    asyncio.run(scenario())


def test_delete_doctor_recomputes_clinics(services):
    async def scenario():
        clinic, first, second, (h1, h2, h3) = await _setup(services)
        await services.doctors.add_health_service(h1, first.id)
        await services.doctors.add_health_service(h2, first.id)
        await services.doctors.add_health_service(h2, second.id)
        await services.doctors.add_health_service(h3, second.id)
        await services.doctors.delete_doctor(first.id)
        return (
            await services.clinics.get_clinic(clinic.id),
            await services.doctors.get_doctor(first.id),
            second,
            {h2, h3},
        )

    clinic, deleted, second, remaining = asyncio.run(scenario())
    assert deleted is None
    assert clinic.doctors == {second.id}
    assert clinic.health_services == remaining


def test_delete_doctor_tolerates_dangling_clinic_reference(services):
    async def scenario():
        doctor = await services.doctors.create_doctor(DoctorCreate(name="D1"))
        await services.doctors.update_doctor_raw(doctor.id, Patch.add("clinics", "f" * 32))
        await services.doctors.delete_doctor(doctor.id)
        return await services.doctors.get_doctor(doctor.id)

    assert asyncio.run(scenario()) is None


def test_delete_unknown_doctor(services):
    with pytest.raises(NotFoundError):
        asyncio.run(services.doctors.delete_doctor(MISSING_ID))


def test_rename_doctor_keeps_relationships(services):
    async def scenario():
        clinic, first, _, (h1, _, _) = await _setup(services)
        await services.doctors.add_health_service(h1, first.id)
        return clinic, h1, await services.doctors.update_doctor(first.id, DoctorUpdate(name="Renamed"))

    clinic, h1, doctor = asyncio.run(scenario())
    assert doctor.name == "Renamed"
    assert doctor.clinics == {clinic.id}
    assert doctor.health_services == {h1}


def test_list_doctors_by_health_service(services):
    async def scenario():
        _, first, _, (h1, _, _) = await _setup(services)
        await services.doctors.add_health_service(h1, first.id)
        return first, await services.doctors.list_doctors({"health_services": h1})

    first, listed = asyncio.run(scenario())
    assert [doctor.id for doctor in listed] == [first.id]


def test_delete_doctor_recomputes_clinic_missing_reverse_link(services):
    async def scenario():
        clinic, first, _, (h1, _, _) = await _setup(services)
        await services.doctors.add_health_service(h1, first.id)
        await services.doctors.update_doctor_raw(first.id, Patch.remove("clinics", clinic.id))
        await services.doctors.delete_doctor(first.id)
        return await services.clinics.get_clinic(clinic.id), first

    clinic, first = asyncio.run(scenario())
    assert first.id not in clinic.doctors
    assert clinic.health_services == set()


class BrokenClinics:
    """Clinic peer whose bulk update fails like a driver error."""

    def __init__(self, clinics):
        self._clinics = clinics

    async def list_clinics(self, *args, **kwargs):
        return await self._clinics.list_clinics(*args, **kwargs)

    async def get_clinics_by_ids(self, clinic_ids):
        return await self._clinics.get_clinics_by_ids(clinic_ids)

    async def update_clinics_by_filter(self, filters, patch):
        raise StorageError("clinics DB update error")

    async def recompute_health_services(self, clinic_id):
        raise AssertionError("recompute must not run after a failed update")


def test_delete_doctor_stops_at_first_failure(services):
    async def scenario():
        clinic, first, _, _ = await _setup(services)
        services.doctors.bind(
            clinics=BrokenClinics(services.clinics), health_services=services.health_services
        )
        with pytest.raises(StorageError):
            await services.doctors.delete_doctor(first.id)
        return clinic, first, await services.doctors.get_doctor(first.id)

    clinic, first, doctor = asyncio.run(scenario())
    assert doctor is not None
    assert doctor.clinics == {clinic.id}
