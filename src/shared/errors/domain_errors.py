"""Domain errors.

Доменные исключения Task Tracker.
"""

import math

from src.shared.errors.base import AppException


class InvalidInputError(AppException):
    """Некорректные входные данные."""

    status_code = 400
    default_message = "Invalid input"

    def __init__(self, violations: list[str]) -> None:
        """Инициализация исключения.

        Args:
            violations: Нарушенные ограничения полей ("field: message").

        """
        super().__init__(
            message="; ".join(violations) if violations else None,
            details={"violations": violations},
        )
        self.violations = violations


class UnauthorizedError(AppException):
    """Запрос без аутентифицированного principal."""

    status_code = 401
    default_message = "Authentication required"


class NotFoundError(AppException):
    """Ресурс не найден."""

    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class TaskNotFoundError(NotFoundError):
    """Задача не найдена или принадлежит другому пользователю.

    Оба случая намеренно неразличимы для клиента.
    """

    code = "TASK_NOT_FOUND"
    default_message = "Task not found"

    def __init__(self, task_id: int) -> None:
        """Инициализация исключения.

        Args:
            task_id: Идентификатор задачи.

        """
        super().__init__(details={"context": {"task_id": task_id}})
        self.task_id = task_id


class RateLimitedError(AppException):
    """Превышен лимит запросов на создание задач."""

    status_code = 429
    default_message = "Too many requests"

    def __init__(self, retry_after: float | None = None) -> None:
        """Инициализация исключения.

        Args:
            retry_after: Через сколько секунд повторить запрос.

        """
        headers = {}
        details = {}
        if retry_after is not None:
            seconds = max(1, math.ceil(retry_after))
            headers["Retry-After"] = str(seconds)
            details["context"] = {"retry_after": seconds}
        super().__init__(details=details, headers=headers)
        self.retry_after = retry_after


class NotificationError(AppException):
    """Уведомление не доставлено.

    Внутренняя ошибка: поглощается NotificationDispatcher и не доходит до API.
    """

    status_code = 502
    code = "NOTIFICATION_FAILURE"
    default_message = "Notification delivery failed"

    def __init__(self, reason: str, provider_status: int | None = None) -> None:
        """Инициализация исключения.

        Args:
            reason: Причина сбоя доставки.
            provider_status: HTTP статус ответа провайдера (если был ответ).

        """
        context: dict[str, object] = {"reason": reason}
        if provider_status is not None:
            context["provider_status"] = provider_status
        super().__init__(message=f"Notification delivery failed: {reason}", details={"context": context})
        self.reason = reason
        self.provider_status = provider_status
