from pydantic import BaseModel, ConfigDict


# Staff user as returned by the API
class StaffUser(BaseModel):
    id: int
    username: str
    full_name: str
    role: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str
    user: StaffUser


class TokenPayload(BaseModel):
    sub: str
    tenant: str
