from fastapi import APIRouter, Depends

from app.api.deps import get_booking_engine, get_tenant
from app.repositories.tenant import TenantScope
from app.schemas.loyalty import LoyaltyStatus
from app.services.booking import BookingEngine

router = APIRouter(prefix="/loyalty", tags=["Loyalty"])


@router.get("/{phone}", response_model=LoyaltyStatus)
def get_loyalty_status(
    phone: str,
    tenant: TenantScope = Depends(get_tenant),
    engine: BookingEngine = Depends(get_booking_engine),
):
    counter = engine.loyalty_for(tenant, phone)
    per_reward = engine.visits_per_reward
    return LoyaltyStatus(
        client_name=counter.client_name,
        client_phone=counter.client_phone,
        total_attendances=counter.total_attendances,
        rewards_used=counter.rewards_used,
        available_rewards=counter.available_rewards(per_reward),
        visits_until_next_reward=per_reward - counter.total_attendances % per_reward,
        last_reward_at=counter.last_reward_at,
    )
