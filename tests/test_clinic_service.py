"""Tests for clinic CRUD and the clinic/doctor relationship."""

import asyncio

import pytest

from clinic_directory_api.app.core.documents import CLINICS, DocumentStore, Patch
from clinic_directory_api.app.core.errors import NotFoundError, ValidationError
from clinic_directory_api.app.schemas.clinic import ClinicCreate, ClinicUpdate
from clinic_directory_api.app.schemas.doctor import DoctorCreate
from clinic_directory_api.app.schemas.health_service import HealthServiceCreate
from clinic_directory_api.app.services.clinic_service import ClinicService

MISSING_ID = "0" * 32


async def _doctor_with_services(services, name, *service_names):
    doctor = await services.doctors.create_doctor(DoctorCreate(name=name))
    for service_name in service_names:
        found = await services.health_services.list_health_services({"name": service_name})
        if found:
            health_service = found[0]
        else:
            health_service = await services.health_services.create_health_service(
                HealthServiceCreate(name=service_name)
            )
        doctor = await services.doctors.add_health_service(health_service.id, doctor.id)
    return doctor


def test_create_clinic_starts_empty(services):
    clinic = asyncio.run(services.clinics.create_clinic(ClinicCreate(name="C1")))
    assert clinic.name == "C1"
    assert clinic.doctors == set()
    assert clinic.health_services == set()


def test_create_clinic_rejects_blank_name(services):
    with pytest.raises(ValidationError):
        asyncio.run(services.clinics.create_clinic(ClinicCreate.model_construct(name="   ")))


def test_update_unknown_clinic(services):
    with pytest.raises(NotFoundError):
        asyncio.run(services.clinics.update_clinic(MISSING_ID, ClinicUpdate(name="X")))


def test_add_doctor_links_both_sides_and_brings_services(services):
    async def scenario():
        doctor = await _doctor_with_services(services, "D1", "H1")
        clinic = await services.clinics.create_clinic(ClinicCreate(name="C1"))
        clinic = await services.clinics.add_doctor(doctor.id, clinic.id)
        return doctor, clinic, await services.doctors.get_doctor(doctor.id)

    doctor, clinic, reloaded = asyncio.run(scenario())
    assert clinic.doctors == {doctor.id}
    assert clinic.health_services == doctor.health_services
    assert reloaded.clinics == {clinic.id}


def test_add_doctor_twice_is_harmless(services):
    async def scenario():
        doctor = await _doctor_with_services(services, "D1", "H1")
        clinic = await services.clinics.create_clinic(ClinicCreate(name="C1"))
        await services.clinics.add_doctor(doctor.id, clinic.id)
        return doctor, await services.clinics.add_doctor(doctor.id, clinic.id)

    doctor, clinic = asyncio.run(scenario())
    assert clinic.doctors == {doctor.id}
    assert len(clinic.health_services) == 1


def test_remove_doctor_keeps_services_still_provided(services):
    async def scenario():
        first = await _doctor_with_services(services, "D1", "H1", "H2")
        second = await _doctor_with_services(services, "D2", "H2", "H3")
        clinic = await services.clinics.create_clinic(ClinicCreate(name="C1"))
        await services.clinics.add_doctor(first.id, clinic.id)
        clinic = await services.clinics.add_doctor(second.id, clinic.id)
        before = set(clinic.health_services)
        clinic = await services.clinics.remove_doctor(first.id, clinic.id)
        return first, second, before, clinic, await services.doctors.get_doctor(first.id)

    first, second, before, clinic, first_reloaded = asyncio.run(scenario())
    assert before == first.health_services | second.health_services
    assert len(before) == 3
    assert clinic.doctors == {second.id}
    assert clinic.health_services == second.health_services
    assert first_reloaded.clinics == set()


def test_recompute_is_idempotent_and_repairs_drift(services):
    async def scenario():
        doctor = await _doctor_with_services(services, "D1", "H1")
        clinic = await services.clinics.create_clinic(ClinicCreate(name="C1"))
        await services.clinics.add_doctor(doctor.id, clinic.id)
        await services.clinics.update_clinic_raw(clinic.id, Patch.assign(health_services={"stale"}))
        once = await services.clinics.recompute_health_services(clinic.id)
        twice = await services.clinics.recompute_health_services(clinic.id)
        return doctor, once, twice

    doctor, once, twice = asyncio.run(scenario())
    assert once.health_services == doctor.health_services
    assert twice.health_services == once.health_services


def test_recompute_unknown_clinic(services):
    with pytest.raises(NotFoundError):
        asyncio.run(services.clinics.recompute_health_services(MISSING_ID))


def test_add_doctor_unknown_entities(services):
    async def scenario():
        doctor = await services.doctors.create_doctor(DoctorCreate(name="D1"))
        clinic = await services.clinics.create_clinic(ClinicCreate(name="C1"))
        with pytest.raises(NotFoundError, match="Doctor not found"):
            await services.clinics.add_doctor(MISSING_ID, clinic.id)
        with pytest.raises(NotFoundError, match="Clinic not found"):
            await services.clinics.add_doctor(doctor.id, MISSING_ID)
        return await services.doctors.get_doctor(doctor.id)

    doctor = asyncio.run(scenario())
    assert doctor.clinics == set()


def test_remove_doctor_unknown_entities(services):
    async def scenario():
        doctor = await services.doctors.create_doctor(DoctorCreate(name="D1"))
        with pytest.raises(NotFoundError, match="Clinic not found"):
            await services.clinics.remove_doctor(doctor.id, MISSING_ID)
        with pytest.raises(NotFoundError, match="Doctor not found"):
            await services.clinics.remove_doctor(MISSING_ID, MISSING_ID)

    asyncio.run(scenario())


def test_delete_clinic_detaches_doctors(services):
    async def scenario():
        doctor = await _doctor_with_services(services, "D1", "H1")
        clinic = await services.clinics.create_clinic(ClinicCreate(name="C1"))
        other = await services.clinics.create_clinic(ClinicCreate(name="C2"))
        await services.clinics.add_doctor(doctor.id, clinic.id)
        await services.clinics.add_doctor(doctor.id, other.id)
        await services.clinics.delete_clinic(clinic.id)
        return (
            clinic,
            other,
            await services.clinics.get_clinic(clinic.id),
            await services.doctors.get_doctor(doctor.id),
        )

    clinic, other, deleted, doctor = asyncio.run(scenario())
    assert deleted is None
    assert doctor.clinics == {other.id}


def test_delete_unknown_clinic(services):
    with pytest.raises(NotFoundError):
        asyncio.run(services.clinics.delete_clinic(MISSING_ID))


def test_list_clinics_by_doctor(services):
    async def scenario():
        doctor = await services.doctors.create_doctor(DoctorCreate(name="D1"))
        first = await services.clinics.create_clinic(ClinicCreate(name="C1"))
        await services.clinics.create_clinic(ClinicCreate(name="C2"))
        await services.clinics.add_doctor(doctor.id, first.id)
        return first, await services.clinics.list_clinics({"doctors": doctor.id})

    first, listed = asyncio.run(scenario())
    assert [clinic.id for clinic in listed] == [first.id]


def test_unbound_peer_raises(database_path):
    service = ClinicService(DocumentStore(database_path, CLINICS))
    with pytest.raises(RuntimeError):
        asyncio.run(service.add_doctor(MISSING_ID, MISSING_ID))
