from app.schemas.common import ErrorResponse
from app.schemas.user import StaffUser, Token, TokenPayload
from app.schemas.catalog import Service, ServiceSummary, Professional, ProfessionalSummary
from app.schemas.availability import (
    WeeklyAvailability, WeeklyAvailabilityCreate, WeeklyAvailabilityUpdate, AvailableSlots,
)
from app.schemas.appointment import Appointment, AppointmentCreate, AppointmentStatusUpdate
from app.schemas.loyalty import LoyaltyStatus
