"""Task Tracker - Core module.

Ядро приложения: доменные модели, enum'ы, константы.
"""

from src.core.constants import (
    DATETIME_FORMAT,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    TASKS_API_PREFIX,
)
from src.core.enums import NotificationAction, RateLimitPolicy, StorageBackend, TaskStatus
from src.core.models import Task, TaskPage, User, format_datetime, utcnow

__all__ = [
    "DATETIME_FORMAT",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "TASKS_API_PREFIX",
    "NotificationAction",
    "RateLimitPolicy",
    "StorageBackend",
    "TaskStatus",
    "Task",
    "TaskPage",
    "format_datetime",
    "User",
    "utcnow",
]
