"""Task Service - write-path логика задач.

Координирует TaskStore, RateLimiter и очередь уведомлений:
admission control (только create) -> валидация -> мутация store -> уведомление (fire-and-forget).

Example:
    >>> service = TaskService(store, rate_limiter, notification_queue)
    >>> task = await service.create(user, {"title": "Buy milk"})
    >>> await service.update(user, task.id, {"status": "completed"})

"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol

from src.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE, MAX_PAGE_SIZE
from src.core.enums import NotificationAction, TaskStatus
from src.core.models import Task, TaskPage, User, utcnow
from src.services.rate_limit import RateLimiter
from src.services.storage import TaskStore
from src.services.task.validation import extract_fields, validate_task_fields
from src.shared.errors import RateLimitedError, TaskNotFoundError
from src.shared.logging import get_logger

logger = get_logger()


class NotificationSink(Protocol):
    """Приёмник уведомлений (NotificationQueue). submit() не блокирует."""

    def submit(self, user: User, task: Task, action: NotificationAction) -> bool: ...


def clamp_pagination(page: int, limit: int) -> tuple[int, int]:
    """page в [1, MAX_PAGE], limit в [1, MAX_PAGE_SIZE]."""
    return min(MAX_PAGE, max(1, page)), min(MAX_PAGE_SIZE, max(1, limit))


class TaskService:
    """Операции над задачами от имени аутентифицированного пользователя.

    Задача чужого пользователя неотличима от несуществующей (TaskNotFoundError).

    Attributes:
        store: Хранилище задач
        rate_limiter: Admission control для create
        notifier: Очередь уведомлений

    """

    def __init__(
        self,
        store: TaskStore,
        rate_limiter: RateLimiter,
        notifier: NotificationSink,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Инициализировать TaskService.

        Args:
            store: Хранилище задач
            rate_limiter: Rate limiter для create
            notifier: Очередь уведомлений
            clock: Источник текущего времени (UTC)

        """
        self.store = store
        self.rate_limiter = rate_limiter
        self.notifier = notifier
        self._clock = clock

    async def create(self, user: User, payload: Any) -> Task:
        """Создать задачу.

        Args:
            user: Principal
            payload: JSON тело запроса (title обязателен)

        Returns:
            Созданная задача

        Raises:
            RateLimitedError: Лимит создания исчерпан (store не трогается)
            InvalidInputError: Нарушены ограничения полей

        """
        decision = await self.rate_limiter.consume(user.email, cost=1)
        if not decision.accepted:
            raise RateLimitedError(retry_after=decision.retry_after)

        fields: dict[str, Any] = {
            "title": "",
            "description": "",
            "status": TaskStatus.PENDING,
            "due_date": None,
        }
        fields.update(extract_fields(payload))
        clean = validate_task_fields(fields)

        now = self._clock()
        task = await self.store.add(Task(owner=user.id, created_at=now, updated_at=now, **clean))

        logger.info("Задача создана", task_id=task.id, owner=user.id, status=task.status.value)

        self._notify(user, task, NotificationAction.CREATE)
        return task

    async def list(
        self,
        user: User,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
        status: str | None = None,
        search: str | None = None,
    ) -> TaskPage:
        """Страница задач пользователя, новые первыми.

        Некорректная пагинация не отклоняется, а приводится к допустимой.
        search ищет по title или description; вместе с search фильтр status не применяется.
        """
        page, limit = clamp_pagination(page, limit)
        tasks = await self.store.query(
            user.id,
            offset=(page - 1) * limit,
            limit=limit,
            status=status or None,
            search=search or None,
        )
        return TaskPage(page=page, limit=limit, tasks=tasks)

    async def get(self, user: User, task_id: int) -> Task:
        """Задача пользователя по id.

        Raises:
            TaskNotFoundError: Нет задачи или она чужая

        """
        return await self._load_owned(user, task_id)

    async def update(self, user: User, task_id: int, payload: Any) -> Task:
        """Частичное обновление: меняются только присланные поля.

        Args:
            user: Principal
            task_id: ID задачи
            payload: JSON тело запроса

        Returns:
            Обновлённая задача

        Raises:
            TaskNotFoundError: Нет задачи или она чужая
            InvalidInputError: Нарушены ограничения полей (store не трогается)

        """
        task = await self._load_owned(user, task_id)
        changes = extract_fields(payload)

        merged = {
            "title": task.title,
            "description": task.description,
            "status": task.status,
            "due_date": task.due_date,
            **changes,
        }
        clean = validate_task_fields(merged)

        updated = task.model_copy(update={**clean, "updated_at": self._clock()})
        if not await self.store.save(updated):
            # Удалена параллельным запросом между чтением и сохранением
            raise TaskNotFoundError(task_id)

        logger.info("Задача обновлена", task_id=task_id, owner=user.id, fields=sorted(changes))

        self._notify(user, updated, NotificationAction.UPDATE)
        return updated

    async def delete(self, user: User, task_id: int) -> None:
        """Удалить задачу (hard delete).

        Уведомление уходит со снимком задачи до удаления.

        Raises:
            TaskNotFoundError: Нет задачи или она чужая

        """
        task = await self._load_owned(user, task_id)

        if not await self.store.remove(task_id):
            # Удалена параллельным запросом между чтением и удалением
            raise TaskNotFoundError(task_id)

        logger.info("Задача удалена", task_id=task_id, owner=user.id)

        self._notify(user, task, NotificationAction.DELETE)

    async def _load_owned(self, user: User, task_id: int) -> Task:
        """Загрузить задачу, принадлежащую пользователю.

        Raises:
            TaskNotFoundError: Нет задачи или она чужая (неразличимо)

        """
        task = await self.store.get(task_id)
        if task is None or not task.is_owned_by(user):
            logger.debug("Задача не найдена или чужая", task_id=task_id, user=user.id)
            raise TaskNotFoundError(task_id)
        return task

    def _notify(self, user: User, task: Task, action: NotificationAction) -> None:
        """Передать уведомление в очередь; сбой не влияет на результат операции."""
        try:
            self.notifier.submit(user, task, action)
        except Exception as e:
            logger.exception(
                "Не удалось поставить уведомление в очередь",
                action=action.value,
                task_id=task.id,
                error=str(e),
            )
