"""
Schedule repository: weekly availability, appointments, catalog lookups and
loyalty counters. Read/write only; rules live in ``app.services``.

Every method takes the tenant scope as its first argument.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.appointment import Appointment, AppointmentStatus
from app.models.availability import WeeklyAvailability
from app.models.catalog import Professional, Service
from app.models.loyalty import LoyaltyCounter
from app.repositories.tenant import TenantScope, scoped_query


@dataclass(frozen=True)
class BookedInterval:
    appointment_id: int
    start_minute: int
    duration_minutes: int

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes


class ScheduleRepository:
    def __init__(self, db: Session):
        self.db = db

    # -----------------------------------------------------------------------
    # Catalog
    # -----------------------------------------------------------------------

    def get_professional(self, tenant: TenantScope, professional_id: int) -> Optional[Professional]:
        return (
            scoped_query(self.db, Professional, tenant)
            .filter(Professional.id == professional_id, Professional.is_active == True)  # noqa: E712
            .first()
        )

    def get_service(self, tenant: TenantScope, service_id: int) -> Optional[Service]:
        return (
            scoped_query(self.db, Service, tenant)
            .filter(Service.id == service_id, Service.is_active == True)  # noqa: E712
            .first()
        )

    def list_professionals(self, tenant: TenantScope) -> List[Professional]:
        return (
            scoped_query(self.db, Professional, tenant)
            .options(joinedload(Professional.services))
            .filter(Professional.is_active == True)  # noqa: E712
            .order_by(Professional.name)
            .all()
        )

    def list_services(self, tenant: TenantScope) -> List[Service]:
        return (
            scoped_query(self.db, Service, tenant)
            .filter(Service.is_active == True)  # noqa: E712
            .order_by(Service.name)
            .all()
        )

    def offers_service(self, tenant: TenantScope, professional: Professional, service: Service) -> bool:
        """A professional with no explicit offering list is taken to offer everything."""
        if professional.tenant_id != tenant.id or service.tenant_id != tenant.id:
            return False
        offered = professional.services
        return not offered or any(s.id == service.id for s in offered)

    # -----------------------------------------------------------------------
    # Weekly availability
    # -----------------------------------------------------------------------

    def list_availability(self, tenant: TenantScope, professional_id: int) -> List[WeeklyAvailability]:
        return (
            scoped_query(self.db, WeeklyAvailability, tenant)
            .filter(WeeklyAvailability.professional_id == professional_id)
            .order_by(WeeklyAvailability.day_of_week, WeeklyAvailability.id)
            .all()
        )

    def get_availability(self, tenant: TenantScope, availability_id: int) -> Optional[WeeklyAvailability]:
        return (
            scoped_query(self.db, WeeklyAvailability, tenant)
            .filter(WeeklyAvailability.id == availability_id)
            .first()
        )

    def window_for_day(
        self, tenant: TenantScope, professional_id: int, day_of_week: int
    ) -> Optional[WeeklyAvailability]:
        """First enabled row for the day; duplicates resolve to the lowest id."""
        return (
            scoped_query(self.db, WeeklyAvailability, tenant)
            .filter(
                WeeklyAvailability.professional_id == professional_id,
                WeeklyAvailability.day_of_week == day_of_week,
                WeeklyAvailability.is_enabled == True,  # noqa: E712
            )
            .order_by(WeeklyAvailability.id)
            .first()
        )

    def add_availability(self, tenant: TenantScope, professional_id: int, **fields) -> WeeklyAvailability:
        fields.pop("tenant_id", None)
        row = WeeklyAvailability(tenant_id=tenant.id, professional_id=professional_id, **fields)
        self.db.add(row)
        self.db.flush()
        return row

    def update_availability(self, tenant: TenantScope, row: WeeklyAvailability, **fields) -> WeeklyAvailability:
        if row.tenant_id != tenant.id:
            raise PermissionError("Availability row belongs to another tenant")
        fields.pop("tenant_id", None)
        fields.pop("professional_id", None)
        for key, value in fields.items():
            setattr(row, key, value)
        self.db.flush()
        return row

    def delete_availability(self, tenant: TenantScope, row: WeeklyAvailability) -> None:
        if row.tenant_id != tenant.id:
            raise PermissionError("Availability row belongs to another tenant")
        self.db.delete(row)
        self.db.flush()

    # -----------------------------------------------------------------------
    # Appointments
    # -----------------------------------------------------------------------

    def appointments_for_day(
        self, tenant: TenantScope, professional_id: int, day: date
    ) -> List[BookedInterval]:
        """Non-cancelled appointments on ``day``, each with its own service duration.

        Only ``day``'s rows are read: admission requires the service to end by
        the window's closing time, which is at most 23:59, so no appointment
        runs into the next day.
        """
        rows = (
            scoped_query(self.db, Appointment, tenant)
            .join(Service, Service.id == Appointment.service_id)
            .with_entities(Appointment.id, Appointment.start_minute, Service.duration_minutes)
            .filter(
                Appointment.professional_id == professional_id,
                Appointment.local_date == day,
                Appointment.status != AppointmentStatus.CANCELLED,
            )
            .order_by(Appointment.start_minute)
            .all()
        )
        return [
            BookedInterval(appointment_id=r[0], start_minute=r[1], duration_minutes=r[2])
            for r in rows
        ]

    def add_appointment(
        self,
        tenant: TenantScope,
        *,
        professional_id: int,
        service_id: int,
        client_name: str,
        client_phone: str,
        local_start: datetime,
        is_loyalty_reward: bool = False,
    ) -> Appointment:
        """Insert a scheduled appointment. ``local_start`` is naive tenant wall clock."""
        appointment = Appointment(
            tenant_id=tenant.id,
            professional_id=professional_id,
            service_id=service_id,
            client_name=client_name,
            client_phone=client_phone,
            local_date=local_start.date(),
            start_minute=local_start.hour * 60 + local_start.minute,
            utc_offset_minutes=tenant.utc_offset_minutes,
            starts_at=tenant.clock.to_utc(local_start),
            status=AppointmentStatus.SCHEDULED,
            is_loyalty_reward=is_loyalty_reward,
        )
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def get_appointment(self, tenant: TenantScope, appointment_id: int, for_update: bool = False) -> Optional[Appointment]:
        query = scoped_query(self.db, Appointment, tenant).filter(Appointment.id == appointment_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def list_appointments(
        self,
        tenant: TenantScope,
        day: Optional[date] = None,
        professional_id: Optional[int] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]:
        query = scoped_query(self.db, Appointment, tenant).options(
            joinedload(Appointment.service), joinedload(Appointment.professional)
        )
        if day:
            query = query.filter(Appointment.local_date == day)
        if professional_id:
            query = query.filter(Appointment.professional_id == professional_id)
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.starts_at).all()

    def appointments_for_phone(self, tenant: TenantScope, client_phone: str) -> List[Appointment]:
        return (
            scoped_query(self.db, Appointment, tenant)
            .options(joinedload(Appointment.service), joinedload(Appointment.professional))
            .filter(Appointment.client_phone == client_phone)
            .order_by(Appointment.starts_at.desc())
            .all()
        )

    def set_status(self, tenant: TenantScope, appointment: Appointment, status: AppointmentStatus) -> Appointment:
        if appointment.tenant_id != tenant.id:
            raise PermissionError("Appointment belongs to another tenant")
        appointment.status = status
        self.db.flush()
        return appointment

    # -----------------------------------------------------------------------
    # Loyalty counters
    # -----------------------------------------------------------------------

    def get_loyalty(self, tenant: TenantScope, client_phone: str, for_update: bool = False) -> Optional[LoyaltyCounter]:
        query = scoped_query(self.db, LoyaltyCounter, tenant).filter(
            LoyaltyCounter.client_phone == client_phone
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def record_attendance(self, tenant: TenantScope, client_phone: str, client_name: str) -> LoyaltyCounter:
        counter = self.get_loyalty(tenant, client_phone, for_update=True)
        if counter is None:
            counter = LoyaltyCounter(
                tenant_id=tenant.id,
                client_phone=client_phone,
                client_name=client_name,
                total_attendances=0,
                rewards_used=0,
            )
            self.db.add(counter)
        counter.total_attendances += 1
        self.db.flush()
        return counter

    def consume_reward(self, tenant: TenantScope, counter: LoyaltyCounter) -> LoyaltyCounter:
        if counter.tenant_id != tenant.id:
            raise PermissionError("Loyalty counter belongs to another tenant")
        counter.rewards_used += 1
        counter.last_reward_at = datetime.now(timezone.utc)
        self.db.flush()
        return counter
