"""Enums для Task Tracker API.

Централизованное хранилище всех enum'ов проекта.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Статус задачи."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class NotificationAction(str, Enum):
    """Мутация задачи, о которой отправляется уведомление."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class RateLimitPolicy(str, Enum):
    """Политика пополнения rate limiter."""

    FIXED_WINDOW = "fixed_window"  # Счётчик на фиксированное окно
    SLIDING_WINDOW = "sliding_window"  # Лог запросов за последние N секунд
    TOKEN_BUCKET = "token_bucket"  # Равномерное пополнение токенов


class StorageBackend(str, Enum):
    """Backend для TaskStore и RateLimiter."""

    MEMORY = "memory"
    REDIS = "redis"


class HealthStatus(str, Enum):
    """Статус здоровья сервиса."""

    HEALTHY = "healthy"  # Все компоненты работают
    DEGRADED = "degraded"  # Есть проблемы, но сервис работает
    UNHEALTHY = "unhealthy"  # Критические проблемы
