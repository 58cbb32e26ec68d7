"""In-memory TaskStore.

Хранилище одного процесса: для разработки и тестов.
"""

import asyncio
import itertools

from src.core.enums import TaskStatus
from src.core.models import Task
from src.services.storage.base import TaskStore, matches_search, parse_status_filter, sort_newest_first
from src.shared.logging import get_logger

logger = get_logger()


class InMemoryTaskStore(TaskStore):
    """In-memory task storage.

    Хранит копии задач, поэтому мутации объекта вне store не видны до save().
    """

    def __init__(self) -> None:
        """Инициализация хранилища."""
        self._storage: dict[int, Task] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def add(self, task: Task) -> Task:
        async with self._lock:
            stored = task.model_copy(update={"id": next(self._ids)})
            self._storage[stored.id] = stored  # type: ignore[index]

        logger.debug("Задача сохранена в памяти", task_id=stored.id)
        return stored.model_copy()

    async def get(self, task_id: int) -> Task | None:
        task = self._storage.get(task_id)
        return task.model_copy() if task else None

    async def save(self, task: Task) -> bool:
        if task.id is None:
            msg = "Нельзя сохранить задачу без id, используйте add()"
            raise ValueError(msg)

        async with self._lock:
            if task.id not in self._storage:
                return False
            self._storage[task.id] = task.model_copy()
        return True

    async def remove(self, task_id: int) -> bool:
        async with self._lock:
            return self._storage.pop(task_id, None) is not None

    async def query(
        self,
        owner: str,
        offset: int,
        limit: int,
        status: TaskStatus | str | None = None,
        search: str | None = None,
    ) -> list[Task]:
        tasks = [t for t in self._storage.values() if t.owner == owner]

        if search:
            tasks = [t for t in tasks if matches_search(t, search)]
        elif status:
            wanted = parse_status_filter(status)
            tasks = [t for t in tasks if t.status is wanted]

        page = sort_newest_first(tasks)[offset : offset + limit]
        return [t.model_copy() for t in page]

