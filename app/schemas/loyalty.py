from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class LoyaltyStatus(BaseModel):
    client_name: str
    client_phone: str
    total_attendances: int
    rewards_used: int
    available_rewards: int
    visits_until_next_reward: int
    last_reward_at: Optional[datetime] = None
