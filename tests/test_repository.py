"""Schedule repository and the tenant boundary."""

from datetime import datetime, time, timezone

import pytest

from app.core.errors import InvalidReference
from app.models.appointment import AppointmentStatus
from app.models.availability import WeeklyAvailability
from app.models.tenant import Tenant
from app.repositories.schedule import ScheduleRepository
from app.repositories.tenant import TenantScope, resolve_tenant, scoped_query

from tests.conftest import MONDAY


def test_resolve_tenant(db, seed):
    scope = resolve_tenant(db, "centro")
    assert scope == TenantScope(id=seed.centro.id, slug="centro", utc_offset_minutes=-180)


def test_resolve_unknown_or_inactive_tenant(db, seed):
    db.add(Tenant(name="Fechada", slug="fechada", is_active=False, utc_offset_minutes=0))
    db.commit()

    with pytest.raises(InvalidReference):
        resolve_tenant(db, "nope")
    with pytest.raises(InvalidReference):
        resolve_tenant(db, "fechada")


def test_raw_tenant_id_is_refused(db, seed):
    repo = ScheduleRepository(db)
    with pytest.raises(TypeError):
        repo.get_professional(seed.centro.id, seed.carlos.id)
    with pytest.raises(TypeError):
        scoped_query(db, WeeklyAvailability, None)


def test_other_tenants_rows_are_invisible(db, seed, centro, norte):
    repo = ScheduleRepository(db)

    assert repo.get_professional(centro, seed.carlos.id) is not None
    assert repo.get_professional(norte, seed.carlos.id) is None
    assert repo.get_service(norte, seed.haircut.id) is None
    assert repo.list_availability(norte, seed.carlos.id) == []
    assert [p.name for p in repo.list_professionals(norte)] == ["Ana"]


def test_window_for_day_picks_lowest_enabled_id(db, seed, centro):
    repo = ScheduleRepository(db)
    disabled = repo.add_availability(
        centro, seed.carlos.id, day_of_week=2, start_time=time(7, 0), end_time=time(11, 0), is_enabled=False
    )
    first = repo.add_availability(centro, seed.carlos.id, day_of_week=2, start_time=time(8, 0), end_time=time(12, 0))
    repo.add_availability(centro, seed.carlos.id, day_of_week=2, start_time=time(14, 0), end_time=time(20, 0))
    db.commit()

    chosen = repo.window_for_day(centro, seed.carlos.id, 2)
    assert chosen.id == first.id
    assert chosen.id > disabled.id
    assert repo.window_for_day(centro, seed.carlos.id, 0) is None


def test_add_availability_ignores_caller_tenant_id(db, seed, centro):
    row = ScheduleRepository(db).add_availability(
        centro, seed.carlos.id, day_of_week=3, start_time=time(9, 0), end_time=time(17, 0),
        tenant_id=seed.norte.id,
    )
    assert row.tenant_id == seed.centro.id


def test_update_across_tenants_is_refused(db, seed, centro, norte):
    repo = ScheduleRepository(db)
    row = repo.window_for_day(centro, seed.carlos.id, 1)
    with pytest.raises(PermissionError):
        repo.update_availability(norte, row, is_enabled=False)


def test_add_appointment_stores_wall_clock_and_instant(db, seed, centro):
    repo = ScheduleRepository(db)
    appointment = repo.add_appointment(
        centro,
        professional_id=seed.carlos.id,
        service_id=seed.beard.id,
        client_name="João",
        client_phone="11999990000",
        local_start=datetime(2030, 1, 7, 14, 0),
    )
    db.commit()
    db.refresh(appointment)

    assert appointment.tenant_id == seed.centro.id
    assert appointment.local_date == MONDAY
    assert appointment.start_minute == 14 * 60
    assert appointment.utc_offset_minutes == -180
    assert appointment.status == AppointmentStatus.SCHEDULED
    assert centro.clock.format_hhmm(appointment.starts_at) == "14:00"
    assert appointment.starts_at.replace(tzinfo=timezone.utc) == datetime(2030, 1, 7, 17, 0, tzinfo=timezone.utc)


def test_appointments_for_day_skip_cancelled_and_carry_service_duration(db, seed, centro, norte):
    repo = ScheduleRepository(db)
    kept = repo.add_appointment(
        centro, professional_id=seed.carlos.id, service_id=seed.beard.id,
        client_name="João", client_phone="1", local_start=datetime(2030, 1, 7, 10, 0),
    )
    cancelled = repo.add_appointment(
        centro, professional_id=seed.carlos.id, service_id=seed.haircut.id,
        client_name="Pedro", client_phone="2", local_start=datetime(2030, 1, 7, 15, 0),
    )
    repo.set_status(centro, cancelled, AppointmentStatus.CANCELLED)
    db.commit()

    booked = repo.appointments_for_day(centro, seed.carlos.id, MONDAY)
    assert [(b.appointment_id, b.start_minute, b.end_minute) for b in booked] == [(kept.id, 600, 660)]
    assert repo.appointments_for_day(norte, seed.carlos.id, MONDAY) == []


def test_loyalty_counter_is_per_tenant(db, seed, centro, norte):
    repo = ScheduleRepository(db)
    repo.record_attendance(centro, "11999990000", "João")
    repo.record_attendance(centro, "11999990000", "João")
    db.commit()

    assert repo.get_loyalty(centro, "11999990000").total_attendances == 2
    assert repo.get_loyalty(norte, "11999990000") is None
