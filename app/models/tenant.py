from sqlalchemy import Column, String, Boolean, DateTime, Integer, func
from sqlalchemy.orm import relationship
from app.core.config import settings
from app.db.session import Base

class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    # Fixed offset of the tenant's wall clock from UTC, e.g. -180 for UTC-3
    utc_offset_minutes = Column(Integer, nullable=False, default=settings.DEFAULT_UTC_OFFSET_MINUTES)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    professionals = relationship("Professional", back_populates="tenant")
    services = relationship("Service", back_populates="tenant")
