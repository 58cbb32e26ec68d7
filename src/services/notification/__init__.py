"""Уведомления о мутациях задач.

- NotificationDispatcher: формирует письмо и делает один POST к провайдеру
- NotificationQueue: fire-and-forget доставка в background worker
"""

from src.services.notification.dispatcher import NotificationDispatcher
from src.services.notification.queue import NotificationJob, NotificationQueue

__all__ = [
    "NotificationDispatcher",
    "NotificationJob",
    "NotificationQueue",
]
