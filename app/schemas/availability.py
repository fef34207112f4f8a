from typing import List, Optional
from datetime import date, time
from pydantic import BaseModel, ConfigDict, Field, model_validator


def check_window(start, end, lunch_start, lunch_end):
    if start is not None and end is not None and not start < end:
        raise ValueError("start_time must be before end_time")
    if (lunch_start is None) != (lunch_end is None):
        raise ValueError("lunch_start and lunch_end must be given together")
    if lunch_start is not None and start is not None and end is not None:
        if not (start <= lunch_start < lunch_end <= end):
            raise ValueError("Lunch break must lie inside the working window")


# Weekly availability — Create (POST /admin/professionals/{id}/availability)
class WeeklyAvailabilityCreate(BaseModel):
    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: time
    end_time: time
    lunch_start: Optional[time] = None
    lunch_end: Optional[time] = None
    is_enabled: bool = True

    @model_validator(mode="after")
    def validate_window(self):
        check_window(self.start_time, self.end_time, self.lunch_start, self.lunch_end)
        return self


# Weekly availability — Update (PATCH /admin/availability/{id})
class WeeklyAvailabilityUpdate(BaseModel):
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    lunch_start: Optional[time] = None
    lunch_end: Optional[time] = None
    is_enabled: Optional[bool] = None


class WeeklyAvailability(BaseModel):
    id: int
    professional_id: int
    day_of_week: int
    start_time: time
    end_time: time
    lunch_start: Optional[time] = None
    lunch_end: Optional[time] = None
    is_enabled: bool

    model_config = ConfigDict(from_attributes=True)


# Response for GET /availability/{professional_id}/{date}
class AvailableSlots(BaseModel):
    professional_id: int
    date: date
    available_slots: List[str]
    reason: Optional[str] = None
