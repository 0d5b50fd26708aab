"""Administrator session models."""

from datetime import datetime, timedelta

from pydantic import Field

from propnet.core.db import MongoModel
from propnet.utils import now

ADMIN_COOKIE = "adminSession"
ADMIN_SESSION_TTL = timedelta(days=7)


class AdminSession(MongoModel):
    """Administrator portal session.

    Indexed on auth_token - unique, created_at (TTL 7 days).
    """

    username: str
    auth_token: str
    created_at: datetime = Field(default_factory=now)
