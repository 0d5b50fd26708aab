"""Session credential models."""

from datetime import timedelta
from typing import NewType

from pydantic import BaseModel, Field

SessionToken = NewType("SessionToken", str)
AdminToken = NewType("AdminToken", str)

SESSION_COOKIE = "session"
SHORT_SESSION_TTL = timedelta(days=1)
LONG_SESSION_TTL = timedelta(days=30)


class Identity(BaseModel):
    """Authenticated subject carried by a verified session credential."""

    subject_id: str = Field(..., description="Profile ID of the signed-in broker")
    phone: str = Field(..., description="Phone number in E.164 format")


class SessionGrant(BaseModel):
    """Freshly issued session credential and the cookie lifetime that matches it."""

    token: SessionToken
    max_age: int  # seconds
