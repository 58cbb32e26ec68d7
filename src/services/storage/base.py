"""TaskStore - абстракция хранилища задач.

CRUD по целочисленному id + выборка задач владельца с фильтрами и пагинацией.
"""

from abc import ABC, abstractmethod

from src.core.enums import TaskStatus
from src.core.models import Task


def matches_search(task: Task, search: str) -> bool:
    """Подстрока (без учёта регистра) в title или description."""
    needle = search.casefold()
    return needle in task.title.casefold() or needle in task.description.casefold()


def parse_status_filter(status: TaskStatus | str) -> TaskStatus | None:
    """Статус фильтра или None для неизвестного значения (ничего не совпадёт)."""
    try:
        return TaskStatus(status)
    except ValueError:
        return None


def sort_newest_first(tasks: list[Task]) -> list[Task]:
    """Порядок выдачи: created_at по убыванию, при равенстве id по убыванию."""
    return sorted(tasks, key=lambda t: (t.created_at, t.id or 0), reverse=True)


class TaskStore(ABC):
    """Базовый интерфейс хранилища задач."""

    @abstractmethod
    async def add(self, task: Task) -> Task:
        """Сохранить новую задачу и назначить ей id.

        Args:
            task: Задача без id

        Returns:
            Сохранённая задача с назначенным id

        """

    @abstractmethod
    async def get(self, task_id: int) -> Task | None:
        """Получить задачу по id (None если не найдена)."""

    @abstractmethod
    async def save(self, task: Task) -> bool:
        """Перезаписать существующую задачу. False если её уже нет (новая не создаётся)."""

    @abstractmethod
    async def remove(self, task_id: int) -> bool:
        """Удалить задачу. True если задача существовала."""

    @abstractmethod
    async def query(
        self,
        owner: str,
        offset: int,
        limit: int,
        status: TaskStatus | str | None = None,
        search: str | None = None,
    ) -> list[Task]:
        """Выборка задач владельца, новые первыми.

        Если задан search, фильтр status не применяется.

        Args:
            owner: User.id владельца
            offset: Сколько задач пропустить
            limit: Максимум задач в ответе
            status: Точный фильтр по статусу
            search: Подстрока в title или description

        Returns:
            Страница задач

        """

    async def close(self) -> None:
        """Освободить ресурсы хранилища."""
        return None
