"""Доменные модели Task Tracker.

Task хранится в TaskStore, User приходит от API boundary уже аутентифицированным.
Все timestamps timezone-aware в UTC.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from src.core.constants import DATETIME_FORMAT
from src.core.enums import TaskStatus


def utcnow() -> datetime:
    """Текущее время в UTC."""
    return datetime.now(timezone.utc)


def format_datetime(value: datetime | None) -> str | None:
    """Отформатировать дату в формате ответа API ("Y-m-d H:i:s")."""
    if value is None:
        return None
    return value.strftime(DATETIME_FORMAT)


class User(BaseModel):
    """Аутентифицированный principal.

    Attributes:
        id: Идентификатор для сравнения владельца задачи
        email: Ключ rate limiter и получатель уведомлений

    """

    id: str
    email: str

    @classmethod
    def from_email(cls, email: str) -> "User":
        """Principal, у которого идентификатором служит нормализованный email."""
        normalized = email.strip().lower()
        return cls(id=normalized, email=normalized)


class Task(BaseModel):
    """Задача пользователя.

    Attributes:
        id: Назначается store при создании, далее неизменен
        owner: User.id создателя, неизменен
        title: Непустой заголовок
        description: Описание (по умолчанию пустое)
        status: Статус задачи
        due_date: Срок выполнения
        created_at: Время создания, неизменно
        updated_at: Время последней мутации

    """

    id: int | None = None
    owner: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_owned_by(self, user: User) -> bool:
        """Проверить владельца задачи."""
        return self.owner == user.id

    def to_public_dict(self) -> dict[str, object]:
        """Каноническое JSON представление задачи (без owner)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "due_date": format_datetime(self.due_date),
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }


class TaskPage(BaseModel):
    """Страница задач владельца (после clamp пагинации)."""

    page: int
    limit: int
    tasks: list[Task]
