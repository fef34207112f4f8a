from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_booking_engine, get_now, get_tenant
from app.repositories.tenant import TenantScope
from app.schemas.availability import AvailableSlots
from app.services.booking import BookingEngine

router = APIRouter(prefix="/availability", tags=["Availability"])


# ---------------------------------------------------------------------------
# Public: bookable slots for a professional on a date (time picker screen)
# ---------------------------------------------------------------------------


@router.get("/{professional_id}/{day}", response_model=AvailableSlots)
def get_available_slots(
    professional_id: int,
    day: date,
    service_id: Optional[int] = Query(None, description="Size slots for this service's duration"),
    tenant: TenantScope = Depends(get_tenant),
    engine: BookingEngine = Depends(get_booking_engine),
    now: datetime = Depends(get_now),
):
    """
    Return the start times (tenant-local ``HH:MM``) still bookable on ``day``.
    An empty list is a normal answer; ``reason`` says why
    (``no_availability_configured``, ``fully_booked``, ``no_future_slots``,
    ``service_does_not_fit``).
    The list can be stale by the time a booking is posted: admission re-checks.
    """
    result = engine.available_slots(tenant, professional_id, day, service_id=service_id, now=now)
    return AvailableSlots(
        professional_id=result.professional_id,
        date=result.day,
        available_slots=result.slots,
        reason=result.reason,
    )
