"""Redis TaskStore.

Redis Schema:
    tasks:next_id           -> String (INCR, источник целочисленных id)
    task:{id}               -> String (orjson тело задачи)
    user:{owner}:tasks      -> Sorted Set (id задач владельца, score = created_at)
"""

import orjson
from redis.asyncio import Redis

from src.core.constants import REDIS_OWNER_INDEX_KEY, REDIS_TASK_ID_KEY, REDIS_TASK_KEY
from src.core.enums import TaskStatus
from src.core.models import Task
from src.services.storage.base import TaskStore, matches_search, parse_status_filter, sort_newest_first
from src.shared.logging import get_logger

logger = get_logger()


def _task_key(task_id: int | str) -> str:
    return REDIS_TASK_KEY.format(task_id=task_id)


def _owner_key(owner: str) -> str:
    return REDIS_OWNER_INDEX_KEY.format(owner=owner)


class RedisTaskStore(TaskStore):
    """Redis-based хранилище задач.

    Общее для всех воркеров приложения. Клиент должен быть создан с decode_responses=True,
    его жизненным циклом управляет владелец (lifespan приложения).
    """

    def __init__(self, redis_client: Redis) -> None:
        """Инициализировать RedisTaskStore.

        Args:
            redis_client: Async Redis client

        """
        self.redis = redis_client

    @staticmethod
    def _dump(task: Task) -> bytes:
        return orjson.dumps(task.model_dump(mode="json"))

    @staticmethod
    def _load(raw: str | bytes) -> Task:
        return Task.model_validate(orjson.loads(raw))

    async def add(self, task: Task) -> Task:
        task_id = int(await self.redis.incr(REDIS_TASK_ID_KEY))
        stored = task.model_copy(update={"id": task_id})

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(_task_key(task_id), self._dump(stored))
            pipe.zadd(_owner_key(stored.owner), {str(task_id): stored.created_at.timestamp()})
            await pipe.execute()

        logger.debug("Задача сохранена в Redis", task_id=task_id, owner=stored.owner)
        return stored

    async def get(self, task_id: int) -> Task | None:
        raw = await self.redis.get(_task_key(task_id))
        if raw is None:
            return None
        return self._load(raw)

    async def save(self, task: Task) -> bool:
        if task.id is None:
            msg = "Нельзя сохранить задачу без id, используйте add()"
            raise ValueError(msg)

        # xx: не воскрешать задачу, удалённую параллельным запросом
        return bool(await self.redis.set(_task_key(task.id), self._dump(task), xx=True))

    async def remove(self, task_id: int) -> bool:
        task = await self.get(task_id)
        if task is None:
            return False

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.delete(_task_key(task_id))
            pipe.zrem(_owner_key(task.owner), str(task_id))
            deleted, _ = await pipe.execute()

        return bool(deleted)

    async def query(
        self,
        owner: str,
        offset: int,
        limit: int,
        status: TaskStatus | str | None = None,
        search: str | None = None,
    ) -> list[Task]:
        index_key = _owner_key(owner)

        if not search and not status:
            ids = await self.redis.zrevrange(index_key, offset, offset + limit - 1)
            return await self._load_many(ids)

        tasks = await self._load_many(await self.redis.zrevrange(index_key, 0, -1))
        if search:
            tasks = [t for t in tasks if matches_search(t, search)]
        else:
            wanted = parse_status_filter(status)  # type: ignore[arg-type]
            tasks = [t for t in tasks if t.status is wanted]

        return sort_newest_first(tasks)[offset : offset + limit]

    async def _load_many(self, ids: list[str]) -> list[Task]:
        """Загрузить задачи по id, пропуская устаревшие записи индекса."""
        if not ids:
            return []

        raws = await self.redis.mget([_task_key(task_id) for task_id in ids])
        tasks = [self._load(raw) for raw in raws if raw is not None]

        if len(tasks) != len(ids):
            logger.warning("Индекс задач содержит удалённые id", requested=len(ids), found=len(tasks))

        return tasks
