from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, UniqueConstraint, func
from app.db.session import Base

class LoyaltyCounter(Base):
    __tablename__ = "loyalty_counters"
    __table_args__ = (
        UniqueConstraint("tenant_id", "client_phone", name="uq_loyalty_tenant_phone"),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    client_phone = Column(String(30), nullable=False)
    client_name = Column(String(255), nullable=False)
    total_attendances = Column(Integer, nullable=False, default=0)
    rewards_used = Column(Integer, nullable=False, default=0)
    last_reward_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def available_rewards(self, visits_per_reward: int) -> int:
        return max(0, self.total_attendances // visits_per_reward - self.rewards_used)
