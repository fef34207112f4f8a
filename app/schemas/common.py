from typing import Optional
from pydantic import BaseModel


# Error responses — every typed booking rejection renders as this
class ErrorResponse(BaseModel):
    error: str
    message: str
    reason: Optional[str] = None
