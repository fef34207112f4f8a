import enum
from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Integer, ForeignKey, Index, text, func,
    Enum as SAEnum,
)
from sqlalchemy.orm import relationship
from app.db.session import Base

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_professional_day", "tenant_id", "professional_id", "local_date"),
        # Last line of defence behind the admission lock: no two live bookings may start together.
        Index(
            "uq_appointments_live_start",
            "tenant_id", "professional_id", "starts_at",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    client_name = Column(String(255), nullable=False)
    client_phone = Column(String(30), nullable=False, index=True)

    # Tenant-local wall clock, tagged with the offset in force when booked
    local_date = Column(Date, nullable=False)
    start_minute = Column(Integer, nullable=False)
    utc_offset_minutes = Column(Integer, nullable=False)
    # Absolute instant, derived once from the three columns above
    starts_at = Column(DateTime(timezone=True), nullable=False)

    status = Column(
        SAEnum(AppointmentStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )
    is_loyalty_reward = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    professional = relationship("Professional")
    service = relationship("Service")
