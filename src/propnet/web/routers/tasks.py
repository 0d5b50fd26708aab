from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from propnet.core.modules.task.models import Task
from propnet.web.deps import AppDep, SessionTokenDep
from propnet.web.openapi import ErrorResponse

router = APIRouter(tags=["tasks"])


class CreateTaskRequest(BaseModel):
    task_text: str = Field(..., min_length=1, description="What needs doing")


class UpdateTaskRequest(BaseModel):
    status: bool = Field(..., description="True when done")


@router.get(
    "/tasks",
    summary="List my tasks",
    operation_id="listTasks",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def list_tasks(app: AppDep, session_token: SessionTokenDep) -> list[Task]:
    return await app.get_tasks(session_token)


@router.post(
    "/tasks",
    summary="Create task",
    operation_id="createTask",
    status_code=201,
    responses={
        400: {"model": ErrorResponse, "description": "Missing task_text"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_task(request: CreateTaskRequest, app: AppDep, session_token: SessionTokenDep) -> Task:
    return await app.create_task(session_token, request.task_text)


@router.patch(
    "/tasks/{task_id}",
    summary="Update task status",
    operation_id="updateTask",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid status"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Task not found"},
    },
)
async def update_task(task_id: UUID, request: UpdateTaskRequest, app: AppDep, session_token: SessionTokenDep) -> Task:
    return await app.update_task_status(session_token, task_id, request.status)
