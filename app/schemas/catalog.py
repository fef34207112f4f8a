from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, ConfigDict


class Service(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    duration_minutes: int

    model_config = ConfigDict(from_attributes=True)


# Compact service for nested responses
class ServiceSummary(BaseModel):
    id: int
    name: str
    duration_minutes: int

    model_config = ConfigDict(from_attributes=True)


class Professional(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    service_ids: List[int] = []

    model_config = ConfigDict(from_attributes=True)


class ProfessionalSummary(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
