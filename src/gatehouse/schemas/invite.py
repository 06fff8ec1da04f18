"""Invitation schemas."""

from datetime import datetime

from pydantic import BaseModel


class InvitationRead(BaseModel):
    """Read model for invitations (admin view)."""

    id: int
    email: str
    code: str
    created_at: datetime

    model_config = {"from_attributes": True}
