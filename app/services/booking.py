"""
Booking engine: the read path (slot listing) and the write path (admission).

Admission re-runs slot generation and conflict filtering against the latest
committed appointments while holding the per-(tenant, professional, date)
guard, then commits the appointment and any loyalty redemption in one
transaction. Either everything is committed or nothing is.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    InvalidReference,
    InvalidStatusTransition,
    OutsideAvailability,
    PastSlot,
    PersistenceUnavailable,
    RewardUnavailable,
    SlotConflict,
)
from app.core.logging import set_log_tenant
from app.models.appointment import Appointment, AppointmentStatus
from app.models.catalog import Professional, Service
from app.models.loyalty import LoyaltyCounter
from app.repositories.schedule import ScheduleRepository
from app.repositories.tenant import TenantScope, persistence_boundary
from app.services.locks import AdmissionLocks
from app.services.slots import DayWindow, Interval, filter_conflicts, generate_slots
from app.utils.wallclock import hhmm_to_minutes, minutes_to_hhmm

logger = logging.getLogger(__name__)

REASON_NO_AVAILABILITY = "no_availability_configured"
REASON_FULLY_BOOKED = "fully_booked"
REASON_NO_FUTURE_SLOTS = "no_future_slots"
REASON_SERVICE_DOES_NOT_FIT = "service_does_not_fit"

# Shared by every engine in this process.
admission_locks = AdmissionLocks(timeout=settings.BOOKING_LOCK_TIMEOUT_SECONDS)


def day_of_week(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class BookingRequest:
    professional_id: int
    service_id: int
    client_name: str
    client_phone: str
    day: date
    start: str  # local "HH:MM"
    redeem_reward: bool = False


@dataclass(frozen=True)
class DaySlots:
    professional_id: int
    day: date
    slots: List[str]
    reason: Optional[str] = None


class BookingEngine:
    def __init__(
        self,
        db: Session,
        locks: AdmissionLocks = admission_locks,
        granularity: int = settings.SLOT_GRANULARITY_MINUTES,
        visits_per_reward: int = settings.LOYALTY_VISITS_PER_REWARD,
    ):
        self.db = db
        self.repo = ScheduleRepository(db)
        self.locks = locks
        self.granularity = granularity
        self.visits_per_reward = visits_per_reward

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    def _professional(self, tenant: TenantScope, professional_id: int) -> Professional:
        professional = self.repo.get_professional(tenant, professional_id)
        if not professional:
            raise InvalidReference(f"Professional {professional_id} not found")
        return professional

    def _service(self, tenant: TenantScope, service_id: int) -> Service:
        service = self.repo.get_service(tenant, service_id)
        if not service:
            raise InvalidReference(f"Service {service_id} not found")
        return service

    def _window(self, tenant: TenantScope, professional_id: int, day: date) -> Optional[DayWindow]:
        row = self.repo.window_for_day(tenant, professional_id, day_of_week(day))
        if row is None:
            return None
        return DayWindow.from_times(row.start_time, row.end_time, row.lunch_start, row.lunch_end)

    # -----------------------------------------------------------------------
    # Read path
    # -----------------------------------------------------------------------

    def available_slots(
        self,
        tenant: TenantScope,
        professional_id: int,
        day: date,
        service_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> DaySlots:
        """Bookable ``HH:MM`` start times. Advisory only: admission re-checks."""
        set_log_tenant(tenant.slug)
        with persistence_boundary(self.db):
            self._professional(tenant, professional_id)
            duration = self._service(tenant, service_id).duration_minutes if service_id else self.granularity
            window = self._window(tenant, professional_id, day)
            if window is None:
                return DaySlots(professional_id, day, [], REASON_NO_AVAILABILITY)

            local_now = tenant.clock.now(now)
            candidates = generate_slots(window, day, local_now, self.granularity, duration)
            if not candidates:
                whole_day = generate_slots(window, day, datetime.min, self.granularity, duration)
                reason = REASON_NO_FUTURE_SLOTS if whole_day else REASON_SERVICE_DOES_NOT_FIT
                return DaySlots(professional_id, day, [], reason)

            busy = [
                Interval(b.start_minute, b.end_minute)
                for b in self.repo.appointments_for_day(tenant, professional_id, day)
            ]
        admissible = filter_conflicts(candidates, duration, busy)
        return DaySlots(
            professional_id,
            day,
            [minutes_to_hhmm(m) for m in admissible],
            None if admissible else REASON_FULLY_BOOKED,
        )

    # -----------------------------------------------------------------------
    # Write path
    # -----------------------------------------------------------------------

    def _check_on_grid(self, window: Optional[DayWindow], request: BookingRequest, minute: int,
                       duration: int, local_now: datetime) -> None:
        if window is None:
            raise OutsideAvailability(
                "The professional does not work on this day", reason=REASON_NO_AVAILABILITY
            )
        candidates = generate_slots(window, request.day, local_now, self.granularity, duration)
        if minute in candidates:
            return
        if minute < window.start or minute + duration > window.end:
            raise OutsideAvailability(
                f"{request.start} is outside working hours "
                f"({minutes_to_hhmm(window.start)}-{minutes_to_hhmm(window.end)})",
                reason="outside_hours",
            )
        lunch = window.lunch
        if lunch and Interval(minute, minute + self.granularity).overlaps(lunch):
            raise OutsideAvailability(
                f"{request.start} falls in the lunch break "
                f"({minutes_to_hhmm(lunch.start)}-{minutes_to_hhmm(lunch.end)})",
                reason="lunch_break",
            )
        raise OutsideAvailability(
            f"{request.start} is not a bookable slot start", reason="not_on_slot_boundary"
        )

    def admit(self, tenant: TenantScope, request: BookingRequest, now: Optional[datetime] = None) -> Appointment:
        """Commit one scheduled appointment or raise without changing anything."""
        set_log_tenant(tenant.slug)
        with persistence_boundary(self.db):
            professional = self._professional(tenant, request.professional_id)
            service = self._service(tenant, request.service_id)
            if not self.repo.offers_service(tenant, professional, service):
                raise InvalidReference(
                    f"Professional {professional.id} does not offer service {service.id}"
                )

            try:
                minute = hhmm_to_minutes(request.start)
            except ValueError as exc:
                raise OutsideAvailability(str(exc), reason="not_on_slot_boundary") from exc
            local_start = datetime.combine(request.day, time()) + timedelta(minutes=minute)
            local_now = tenant.clock.now(now)
            if local_start <= local_now:
                raise PastSlot(f"{request.day} {request.start} is not in the future")

            duration = service.duration_minutes
            window = self._window(tenant, professional.id, request.day)
            self._check_on_grid(window, request, minute, duration, local_now)

            try:
                appointment = self._commit_admission(tenant, request, service, local_start, minute, duration)
            except IntegrityError as exc:
                self.db.rollback()
                logger.warning("Unique start index rejected %s %s", request.day, request.start)
                raise SlotConflict(
                    f"{request.start} on {request.day} was just booked by someone else"
                ) from exc

        logger.info(
            "Appointment %s admitted: professional=%s %s %s (%d min)",
            appointment.id, professional.id, request.day, request.start, duration,
        )
        return appointment

    def _commit_admission(
        self,
        tenant: TenantScope,
        request: BookingRequest,
        service: Service,
        local_start: datetime,
        minute: int,
        duration: int,
    ) -> Appointment:
        with self.locks.hold(self.db, tenant.id, request.professional_id, request.day):
            try:
                busy = [
                    Interval(b.start_minute, b.end_minute)
                    for b in self.repo.appointments_for_day(tenant, request.professional_id, request.day)
                ]
                if not filter_conflicts([minute], duration, busy):
                    logger.warning(
                        "Slot conflict for professional=%s %s %s",
                        request.professional_id, request.day, request.start,
                    )
                    raise SlotConflict(
                        f"{request.start} on {request.day} overlaps an existing appointment"
                    )

                counter: Optional[LoyaltyCounter] = None
                if request.redeem_reward:
                    counter = self.repo.get_loyalty(tenant, request.client_phone, for_update=True)
                    if counter is None or counter.available_rewards(self.visits_per_reward) < 1:
                        raise RewardUnavailable(
                            f"No loyalty reward available for {request.client_phone}"
                        )

                appointment = self.repo.add_appointment(
                    tenant,
                    professional_id=request.professional_id,
                    service_id=service.id,
                    client_name=request.client_name,
                    client_phone=request.client_phone,
                    local_start=local_start,
                    is_loyalty_reward=request.redeem_reward,
                )
                if counter is not None:
                    self.repo.consume_reward(tenant, counter)
                self.db.commit()
            except (SlotConflict, RewardUnavailable):
                self.db.rollback()
                raise
        self.db.refresh(appointment)
        return appointment

    # -----------------------------------------------------------------------
    # Staff actions
    # -----------------------------------------------------------------------

    def change_status(self, tenant: TenantScope, appointment_id: int, status: AppointmentStatus) -> Appointment:
        """
        scheduled -> completed (counts a loyalty attendance unless the visit
        was itself a reward) or scheduled -> cancelled. Nothing else.
        """
        set_log_tenant(tenant.slug)
        with persistence_boundary(self.db):
            appointment = self.repo.get_appointment(tenant, appointment_id, for_update=True)
            if not appointment:
                raise InvalidReference(f"Appointment {appointment_id} not found")
            if appointment.status != AppointmentStatus.SCHEDULED or status == AppointmentStatus.SCHEDULED:
                self.db.rollback()
                raise InvalidStatusTransition(
                    f"Cannot move appointment from '{appointment.status.value}' to '{status.value}'"
                )
            try:
                if status == AppointmentStatus.COMPLETED and not appointment.is_loyalty_reward:
                    self.repo.record_attendance(tenant, appointment.client_phone, appointment.client_name)
                self.repo.set_status(tenant, appointment, status)
                self.db.commit()
            except IntegrityError as exc:
                # Concurrent first attendance for the same phone created the counter.
                self.db.rollback()
                raise PersistenceUnavailable("Loyalty counter changed concurrently, please retry") from exc
            self.db.refresh(appointment)
        logger.info("Appointment %s marked %s", appointment.id, status.value)
        return appointment

    def loyalty_for(self, tenant: TenantScope, client_phone: str) -> LoyaltyCounter:
        set_log_tenant(tenant.slug)
        with persistence_boundary(self.db):
            counter = self.repo.get_loyalty(tenant, client_phone)
        if not counter:
            raise InvalidReference(f"No loyalty record for {client_phone}")
        return counter
