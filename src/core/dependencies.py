"""Task Tracker - Dependencies.

Dependency Injection для FastAPI.
"""

from typing import Annotated

from fastapi import Depends, Header, Request

from src.core.constants import USER_EMAIL_HEADER
from src.core.models import User
from src.services.notification import NotificationQueue
from src.services.task import TaskService
from src.shared.errors import UnauthorizedError


# ==================== Service Dependencies ====================


def get_task_service(request: Request) -> TaskService:
    """Получить TaskService из состояния приложения.

    Args:
        request: HTTP запрос FastAPI.

    Returns:
        Экземпляр TaskService.

    """
    return request.app.state.task_service


def get_notification_queue(request: Request) -> NotificationQueue:
    """Получить очередь уведомлений из состояния приложения."""
    return request.app.state.notification_queue


# ==================== Principal ====================


def get_current_user(
    x_user_email: Annotated[str | None, Header(alias=USER_EMAIL_HEADER)] = None,
) -> User:
    """Principal текущего запроса.

    Аутентификацию выполняет upstream gateway и передаёт email в заголовке.

    Raises:
        UnauthorizedError: Заголовок отсутствует или пуст

    """
    if not x_user_email or not x_user_email.strip():
        raise UnauthorizedError()
    return User.from_email(x_user_email)


# ==================== Type Aliases ====================
# Используются для более чистого кода в route handlers

TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
NotificationQueueDep = Annotated[NotificationQueue, Depends(get_notification_queue)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
