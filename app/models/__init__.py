from app.models.tenant import Tenant
from app.models.user import StaffUser
from app.models.catalog import Service, Professional, professional_services
from app.models.availability import WeeklyAvailability
from app.models.appointment import Appointment, AppointmentStatus
from app.models.loyalty import LoyaltyCounter
