from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_booking_engine, get_now, get_tenant
from app.api.v1.serializers import serialize_appointment
from app.db.session import get_db
from app.repositories.schedule import ScheduleRepository
from app.repositories.tenant import TenantScope
from app.schemas.appointment import Appointment as AppointmentSchema, AppointmentCreate
from app.schemas.common import ErrorResponse
from app.services.booking import BookingEngine, BookingRequest

router = APIRouter(prefix="/appointments", tags=["Appointments"])


# ---------------------------------------------------------------------------
# POST /appointments — book a slot
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=AppointmentSchema,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def create_appointment(
    data: AppointmentCreate,
    tenant: TenantScope = Depends(get_tenant),
    engine: BookingEngine = Depends(get_booking_engine),
    now: datetime = Depends(get_now),
):
    """
    Book ``start_time`` (tenant-local wall clock) on ``date``.

    Rejections:
    - `invalid_reference` — unknown/inactive professional or service, or the
      professional does not offer the service
    - `outside_availability` — not a slot the professional offers that day
    - `past_slot` — the start is not in the future
    - `slot_conflict` — overlaps an appointment committed meanwhile; re-fetch slots
    - `reward_unavailable` — redemption requested without an earned reward
    """
    appointment = engine.admit(
        tenant,
        BookingRequest(
            professional_id=data.professional_id,
            service_id=data.service_id,
            client_name=data.client_name,
            client_phone=data.client_phone,
            day=data.date,
            start=data.start_time,
            redeem_reward=data.redeem_reward,
        ),
        now=now,
    )
    return serialize_appointment(appointment)


# ---------------------------------------------------------------------------
# GET /appointments/lookup — a client's appointments by phone
# ---------------------------------------------------------------------------


@router.get("/lookup", response_model=List[AppointmentSchema])
def lookup_appointments(
    phone: str = Query(..., min_length=1),
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Return every appointment booked under ``phone``, newest first."""
    appointments = ScheduleRepository(db).appointments_for_phone(tenant, phone.strip())
    return [serialize_appointment(a) for a in appointments]
