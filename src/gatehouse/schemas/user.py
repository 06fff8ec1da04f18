from datetime import datetime

from pydantic import BaseModel


class UserRead(BaseModel):
    """Public view of an account. Never exposes the password hash."""

    id: int
    email: str
    is_admin: bool
    is_owner: bool
    active: bool
    auth_token: str
    created_at: datetime

    model_config = {"from_attributes": True}
