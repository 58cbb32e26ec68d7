"""Notification Queue - фоновая доставка уведомлений.

Запрос только кладёт задание в очередь и отвечает клиенту; письмо отправляет
background worker. Порядок между ответом API и доставкой не гарантируется.

Example:
    >>> queue = NotificationQueue(dispatcher)
    >>> await queue.start()
    >>> queue.submit(user, task, NotificationAction.CREATE)
    >>> await queue.stop()

"""

import asyncio
import contextlib
from dataclasses import dataclass

from src.core.constants import DEFAULT_NOTIFICATION_QUEUE_SIZE, NOTIFICATION_DRAIN_TIMEOUT
from src.core.enums import NotificationAction
from src.core.models import Task, User
from src.services.notification.dispatcher import NotificationDispatcher
from src.shared.logging import get_logger

logger = get_logger()


@dataclass(frozen=True)
class NotificationJob:
    """Снимок данных для одного письма."""

    user: User
    task: Task
    action: NotificationAction


class NotificationQueue:
    """Bounded очередь уведомлений с одним background worker.

    Attributes:
        dispatcher: Отправитель писем
        max_size: Максимум ожидающих заданий

    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        max_size: int = DEFAULT_NOTIFICATION_QUEUE_SIZE,
        drain_timeout: float = NOTIFICATION_DRAIN_TIMEOUT,
    ) -> None:
        """Инициализировать NotificationQueue.

        Args:
            dispatcher: Отправитель писем
            max_size: Максимум ожидающих заданий
            drain_timeout: Сколько ждать доставки оставшихся заданий при stop()

        """
        self.dispatcher = dispatcher
        self.max_size = max_size
        self.drain_timeout = drain_timeout

        self._queue: asyncio.Queue[NotificationJob] = asyncio.Queue(maxsize=max_size)
        self._running = False
        self._worker_task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        """Количество заданий в очереди."""
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._running

    def submit(self, user: User, task: Task, action: NotificationAction) -> bool:
        """Поставить письмо в очередь без ожидания.

        Args:
            user: Получатель
            task: Задача (копируется, последующие мутации не влияют на письмо)
            action: Действие

        Returns:
            True если задание принято, False если очередь переполнена

        """
        job = NotificationJob(user=user, task=task.model_copy(), action=action)

        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.warning(
                "Очередь уведомлений переполнена, письмо отброшено",
                action=action.value,
                task_id=task.id,
                max_size=self.max_size,
            )
            return False

        logger.debug("Уведомление поставлено в очередь", action=action.value, task_id=task.id)
        return True

    async def start(self) -> None:
        """Запустить background worker."""
        if self._running:
            logger.warning("NotificationQueue уже запущена")
            return

        self._running = True
        self._worker_task = asyncio.create_task(self._worker_loop())

        logger.info("NotificationQueue запущена", max_size=self.max_size)

    async def stop(self) -> None:
        """Дождаться доставки оставшихся писем (не дольше drain_timeout) и остановить worker."""
        if not self._running:
            return

        try:
            await asyncio.wait_for(self._queue.join(), timeout=self.drain_timeout)
        except asyncio.TimeoutError:
            logger.warning("Не все уведомления доставлены до остановки", pending=self.pending)

        self._running = False

        if self._worker_task:
            self._worker_task.cancel()

            with contextlib.suppress(asyncio.CancelledError):
                await self._worker_task

        logger.info("NotificationQueue остановлена")

    async def _worker_loop(self) -> None:
        """Главный цикл worker."""
        while self._running:
            job = await self._queue.get()
            try:
                await self.dispatcher.send(job.user, job.task, job.action)
            except Exception as e:
                # send() не бросает, но worker не должен умереть ни при каких условиях
                logger.exception("Ошибка в worker уведомлений", error=str(e))
            finally:
                self._queue.task_done()
