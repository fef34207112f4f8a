from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field

from app.models.appointment import AppointmentStatus
from app.schemas.catalog import ServiceSummary, ProfessionalSummary


# Appointment — Create (POST /appointments)
class AppointmentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    professional_id: int
    service_id: int
    client_name: str = Field(min_length=1, max_length=255)
    client_phone: str = Field(min_length=1, max_length=30)
    date: date
    start_time: str = Field(pattern=r"^\d{2}:\d{2}$", description="Local wall clock, HH:MM")
    redeem_reward: bool = False


# Appointment — Status change (PATCH /admin/appointments/{id}/status)
class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class Appointment(BaseModel):
    id: int
    professional_id: int
    service_id: int
    client_name: str
    client_phone: str
    date: date
    start_time: str
    end_time: str
    utc_offset_minutes: int
    starts_at: datetime
    status: AppointmentStatus
    is_loyalty_reward: bool
    service: Optional[ServiceSummary] = None
    professional: Optional[ProfessionalSummary] = None
