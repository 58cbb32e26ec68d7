"""Notification Dispatcher - письма о мутациях задач.

Отвечает ТОЛЬКО за формирование и отправку письма.
НЕ влияет на мутацию задачи: любой сбой логируется и превращается в False.

Example:
    >>> dispatcher = NotificationDispatcher(api_key="SG.xxx", from_email="noreply@example.com")
    >>> await dispatcher.send(user, task, "create")
    True

"""

import httpx

from src.core.constants import (
    DEFAULT_NOTIFICATION_TIMEOUT,
    DEFAULT_PROVIDER_URL,
    PROVIDER_ACCEPTED_STATUS,
)
from src.core.enums import NotificationAction
from src.core.models import Task, User
from src.services.notification.templates import build_provider_payload, render
from src.shared.errors import NotificationError
from src.shared.logging import get_logger

logger = get_logger()


class NotificationDispatcher:
    """Service для отправки уведомлений через transactional email провайдер.

    Один POST на письмо, без retry. Успех - только статус 202 от провайдера.

    Attributes:
        api_key: Bearer токен провайдера (None - уведомления отключены)
        from_email: Адрес отправителя
        endpoint: URL провайдера
        timeout: HTTP timeout в секундах

    """

    def __init__(
        self,
        api_key: str | None,
        from_email: str,
        endpoint: str = DEFAULT_PROVIDER_URL,
        timeout: float = DEFAULT_NOTIFICATION_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Инициализировать NotificationDispatcher.

        Args:
            api_key: Bearer токен провайдера
            from_email: Адрес отправителя
            endpoint: URL провайдера
            timeout: HTTP timeout
            transport: Кастомный httpx transport (тесты, прокси)

        """
        self.api_key = api_key
        self.from_email = from_email
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

        logger.info(
            "NotificationDispatcher инициализирован",
            endpoint=endpoint,
            timeout=timeout,
            enabled=api_key is not None,
        )

    async def send(self, user: User, task: Task, action: NotificationAction | str) -> bool:
        """Отправить письмо о мутации задачи.

        Args:
            user: Получатель (владелец задачи)
            task: Задача (для delete - снимок до удаления)
            action: create, update или delete

        Returns:
            True если провайдер принял письмо, False иначе

        Note:
            НЕ бросает исключения - логирует ошибки и возвращает False.

        """
        try:
            action = NotificationAction(action)
        except ValueError:
            logger.warning("Unknown action for task notification", action=str(action))
            return False

        if not self.api_key:
            logger.debug("Уведомления отключены: provider_api_key не задан", action=action.value)
            return False

        subject, body = render(action, user.email, task.title)
        payload = build_provider_payload(user.email, self.from_email, subject, body)

        try:
            await self._deliver(payload)
        except NotificationError as e:
            logger.error(
                "Failed to send task notification",
                action=action.value,
                task_id=task.id,
                status_code=e.provider_status,
                reason=e.reason,
            )
            return False
        except Exception as e:
            logger.exception(
                "Exception while sending task notification",
                action=action.value,
                task_id=task.id,
                error=str(e),
            )
            return False

        logger.info(
            "Task notification sent successfully",
            action=action.value,
            user=user.email,
            task_id=task.id,
        )
        return True

    async def _deliver(self, payload: dict) -> None:
        """Один POST к провайдеру.

        Raises:
            NotificationError: Транспортная ошибка или статус не 202

        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise NotificationError(reason=f"{type(e).__name__}: {e}") from e

        if response.status_code != PROVIDER_ACCEPTED_STATUS:
            raise NotificationError(
                reason=response.text[:500] or "unexpected status",
                provider_status=response.status_code,
            )
