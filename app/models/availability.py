from sqlalchemy import Column, Boolean, Integer, ForeignKey, Time, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.session import Base

class WeeklyAvailability(Base):
    __tablename__ = "weekly_availability"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day"),
        CheckConstraint("start_time < end_time", name="ck_availability_window"),
        CheckConstraint(
            "(lunch_start IS NULL AND lunch_end IS NULL) OR "
            "(lunch_start IS NOT NULL AND lunch_end IS NOT NULL)",
            name="ck_availability_lunch_pair",
        ),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    lunch_start = Column(Time, nullable=True)
    lunch_end = Column(Time, nullable=True)
    is_enabled = Column(Boolean, default=True, nullable=False)

    professional = relationship("Professional", back_populates="availability")
