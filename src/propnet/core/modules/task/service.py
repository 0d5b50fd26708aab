from typing import Any
from uuid import UUID

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from propnet.core.core import Service
from propnet.core.modules.task.models import Task
from propnet.errors import NotFoundError, ValidationError

MAX_TASKS = 500


class TaskService(Service):
    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("tasks")

    async def on_start(self) -> None:
        await self._collection.create_index([("user_id", 1), ("created_at", -1)])

    async def list_tasks(self, user_id: UUID) -> list[Task]:
        """Get the user's tasks, newest first."""
        cursor = self._collection.find({"user_id": user_id}).sort("created_at", -1).limit(MAX_TASKS)
        return await Task.list_cursor(cursor)

    async def create_task(self, user_id: UUID, task_text: str) -> Task:
        task_text = task_text.strip()
        if not task_text:
            raise ValidationError("Missing task_text")
        task = Task(user_id=user_id, task_text=task_text)
        await self._collection.insert_one(task.to_mongo())
        return task

    async def set_status(self, user_id: UUID, task_id: UUID, status: bool) -> Task:
        """Mark one of the user's own tasks done or not done."""
        doc = await self._collection.find_one_and_update(
            {"_id": task_id, "user_id": user_id},
            {"$set": {"status": status}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Task not found")
        return Task.model_validate(doc)
