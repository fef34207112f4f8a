from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_booking_engine, get_current_staff, get_tenant
from app.api.v1.serializers import serialize_appointment
from app.db.session import get_db
from app.models.appointment import AppointmentStatus
from app.models.user import StaffUser
from app.repositories.schedule import ScheduleRepository
from app.repositories.tenant import TenantScope
from app.schemas.appointment import Appointment as AppointmentSchema, AppointmentStatusUpdate
from app.services.booking import BookingEngine

router = APIRouter(prefix="/admin/appointments", tags=["Admin - Appointments"])


@router.get("/", response_model=List[AppointmentSchema])
def list_appointments(
    day: Optional[date] = Query(None, alias="date", description="Tenant-local date (YYYY-MM-DD)"),
    professional_id: Optional[int] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
    current_user: StaffUser = Depends(get_current_staff),
):
    """Calendar view: the tenant's appointments, earliest first."""
    appointments = ScheduleRepository(db).list_appointments(
        tenant, day=day, professional_id=professional_id, status=status
    )
    return [serialize_appointment(a) for a in appointments]


@router.patch("/{appointment_id}/status", response_model=AppointmentSchema)
def update_appointment_status(
    appointment_id: int,
    body: AppointmentStatusUpdate,
    tenant: TenantScope = Depends(get_tenant),
    engine: BookingEngine = Depends(get_booking_engine),
    current_user: StaffUser = Depends(get_current_staff),
):
    """
    Mark a scheduled appointment completed (counts towards the client's
    loyalty reward) or cancelled (frees the slot). Appointments are never
    deleted.
    """
    appointment = engine.change_status(tenant, appointment_id, body.status)
    return serialize_appointment(appointment)
