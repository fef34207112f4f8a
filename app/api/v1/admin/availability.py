from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin, get_tenant
from app.db.session import get_db
from app.models.user import StaffUser
from app.repositories.schedule import ScheduleRepository
from app.repositories.tenant import TenantScope
from app.schemas.availability import (
    WeeklyAvailability as WeeklyAvailabilitySchema,
    WeeklyAvailabilityCreate,
    WeeklyAvailabilityUpdate,
    check_window,
)

router = APIRouter(prefix="/admin/professionals", tags=["Admin - Availability"])
availability_router = APIRouter(prefix="/admin/availability", tags=["Admin - Availability"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_professional_or_404(repo: ScheduleRepository, tenant: TenantScope, professional_id: int):
    professional = repo.get_professional(tenant, professional_id)
    if not professional:
        raise HTTPException(status_code=404, detail="Professional not found")
    return professional


def _commit(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Availability window violates a schedule constraint",
        )


# ---------------------------------------------------------------------------
# Weekly schedule of a professional
# ---------------------------------------------------------------------------


@router.get("/{professional_id}/availability", response_model=List[WeeklyAvailabilitySchema])
def list_availability(
    professional_id: int,
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
    current_user: StaffUser = Depends(get_current_admin),
):
    repo = ScheduleRepository(db)
    _get_professional_or_404(repo, tenant, professional_id)
    return repo.list_availability(tenant, professional_id)


@router.post(
    "/{professional_id}/availability",
    response_model=WeeklyAvailabilitySchema,
    status_code=status.HTTP_201_CREATED,
)
def create_availability(
    professional_id: int,
    data: WeeklyAvailabilityCreate,
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
    current_user: StaffUser = Depends(get_current_admin),
):
    """
    Add a weekly window. If the day already has an enabled window, the one
    with the lowest id keeps being used for booking.
    """
    repo = ScheduleRepository(db)
    _get_professional_or_404(repo, tenant, professional_id)
    row = repo.add_availability(tenant, professional_id, **data.model_dump())
    _commit(db)
    db.refresh(row)
    return row


@availability_router.patch("/{availability_id}", response_model=WeeklyAvailabilitySchema)
def update_availability(
    availability_id: int,
    data: WeeklyAvailabilityUpdate,
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
    current_user: StaffUser = Depends(get_current_admin),
):
    repo = ScheduleRepository(db)
    row = repo.get_availability(tenant, availability_id)
    if not row:
        raise HTTPException(status_code=404, detail="Availability not found")

    changes = data.model_dump(exclude_unset=True)
    merged = {
        key: changes.get(key, getattr(row, key))
        for key in ("start_time", "end_time", "lunch_start", "lunch_end")
    }
    try:
        check_window(
            merged["start_time"], merged["end_time"], merged["lunch_start"], merged["lunch_end"]
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    repo.update_availability(tenant, row, **changes)
    _commit(db)
    db.refresh(row)
    return row


@availability_router.delete("/{availability_id}", status_code=status.HTTP_200_OK)
def delete_availability(
    availability_id: int,
    tenant: TenantScope = Depends(get_tenant),
    db: Session = Depends(get_db),
    current_user: StaffUser = Depends(get_current_admin),
):
    repo = ScheduleRepository(db)
    row = repo.get_availability(tenant, availability_id)
    if not row:
        raise HTTPException(status_code=404, detail="Availability not found")
    repo.delete_availability(tenant, row)
    db.commit()
    return {"message": "Availability deleted successfully"}
