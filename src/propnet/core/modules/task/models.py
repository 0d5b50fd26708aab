from datetime import datetime
from uuid import UUID

from pydantic import Field

from propnet.core.db import MongoModel
from propnet.utils import now


class Task(MongoModel):
    """Personal to-do item of a broker."""

    user_id: UUID
    task_text: str
    status: bool = False  # True when done
    created_at: datetime = Field(default_factory=now)
