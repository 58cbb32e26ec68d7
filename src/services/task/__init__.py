"""Task Management Module.

- TaskService: create/list/get/update/delete от имени principal
- validation: ограничения полей задачи

Архитектура:
    ┌─────────────────────┐
    │     TaskService     │  (оркестратор)
    └──────────┬──────────┘
               │
       ┌───────┼──────────────┐
       │       │              │
       ▼       ▼              ▼
   TaskStore RateLimiter NotificationQueue
                              │
                              ▼
                   NotificationDispatcher

Example:
    >>> from src.services.task import TaskService
    >>> service = TaskService(store, rate_limiter, notification_queue)
    >>> task = await service.create(user, {"title": "Buy milk"})

"""

from src.services.task.task_service import NotificationSink, TaskService, clamp_pagination
from src.services.task.validation import extract_fields, parse_due_date, validate_task_fields

__all__ = [
    "NotificationSink",
    "TaskService",
    "clamp_pagination",
    "extract_fields",
    "parse_due_date",
    "validate_task_fields",
]
