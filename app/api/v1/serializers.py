from app.models.appointment import Appointment
from app.schemas.appointment import Appointment as AppointmentSchema
from app.schemas.catalog import ProfessionalSummary, ServiceSummary
from app.utils.wallclock import minutes_to_hhmm


def serialize_appointment(appointment: Appointment) -> AppointmentSchema:
    """Convert an Appointment ORM object to its schema representation."""
    service = appointment.service
    duration = service.duration_minutes if service else 0
    return AppointmentSchema(
        id=appointment.id,
        professional_id=appointment.professional_id,
        service_id=appointment.service_id,
        client_name=appointment.client_name,
        client_phone=appointment.client_phone,
        date=appointment.local_date,
        start_time=minutes_to_hhmm(appointment.start_minute),
        end_time=minutes_to_hhmm(appointment.start_minute + duration),
        utc_offset_minutes=appointment.utc_offset_minutes,
        starts_at=appointment.starts_at,
        status=appointment.status,
        is_loyalty_reward=appointment.is_loyalty_reward,
        service=ServiceSummary.model_validate(service) if service else None,
        professional=(
            ProfessionalSummary.model_validate(appointment.professional)
            if appointment.professional else None
        ),
    )
