"""Response Schemas для Task Tracker API.

Pydantic models для API responses. Формат дат "Y-m-d H:i:s".
"""

from typing import Literal

from pydantic import BaseModel, Field

from src.core.models import Task


class TaskSchema(BaseModel):
    """Каноническое представление задачи.

    Используется в:
    - POST /api/tasks (создание)
    - GET /api/tasks, GET /api/tasks/{id}
    - PUT /api/tasks/{id} (обновление)
    """

    id: int = Field(description="ID задачи")

    title: str = Field(description="Заголовок")

    description: str = Field(description="Описание")

    status: Literal["pending", "in-progress", "completed"] = Field(description="Статус задачи")

    due_date: str | None = Field(description="Срок выполнения (Y-m-d H:i:s)")

    created_at: str = Field(description="Timestamp создания (Y-m-d H:i:s)")

    updated_at: str = Field(description="Timestamp последнего обновления (Y-m-d H:i:s)")

    @classmethod
    def from_task(cls, task: Task) -> "TaskSchema":
        return cls.model_validate(task.to_public_dict())


class TaskEnvelope(BaseModel):
    """Ответ GET /api/tasks/{id}."""

    task: TaskSchema


class TaskMutationResponse(BaseModel):
    """Ответ на создание/обновление задачи."""

    message: str = Field(examples=["Task created successfully"])
    task: TaskSchema


class TaskListResponse(BaseModel):
    """Страница задач (page и limit после clamp)."""

    page: int = Field(ge=1)
    limit: int = Field(ge=1, le=100)
    tasks: list[TaskSchema]


class MessageResponse(BaseModel):
    """Подтверждение без данных задачи."""

    message: str = Field(examples=["Task deleted successfully"])


class HealthResponse(BaseModel):
    """Статус сервиса."""

    status: Literal["healthy", "degraded", "unhealthy"]
    service: str
    version: str
    storage_backend: str
    notifications_pending: int = Field(description="Писем в очереди")
