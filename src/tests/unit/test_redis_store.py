"""Unit тесты для services/storage/redis_store.py."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import orjson
import pytest

from src.core.enums import TaskStatus
from src.core.models import Task
from src.services.storage import RedisTaskStore, create_task_store

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _task(task_id: int | None = None, minutes: int = 0, **kwargs: object) -> Task:
    created = BASE_TIME + timedelta(minutes=minutes)
    return Task(
        id=task_id,
        owner=kwargs.pop("owner", "a@x.com"),
        title=kwargs.pop("title", "task"),
        created_at=created,
        updated_at=created,
        **kwargs,
    )


def _raw(task: Task) -> str:
    return orjson.dumps(task.model_dump(mode="json")).decode()


@pytest.fixture
def redis_store(mock_redis: MagicMock) -> RedisTaskStore:
    """Фикстура RedisTaskStore с mock Redis."""
    return RedisTaskStore(mock_redis)


class TestRedisTaskStore:
    """Тесты для RedisTaskStore."""

    @pytest.mark.asyncio
    async def test_add(self, redis_store: RedisTaskStore, mock_redis: MagicMock) -> None:
        """add берёт id из INCR и пишет тело + индекс владельца в одной транзакции."""
        mock_redis.incr.return_value = 7

        stored = await redis_store.add(_task())

        assert stored.id == 7
        mock_redis.incr.assert_awaited_once_with("tasks:next_id")
        mock_redis.pipeline.assert_called_once_with(transaction=True)

        pipe = mock_redis.pipe
        key, body = pipe.set.call_args[0]
        assert key == "task:7"
        assert orjson.loads(body)["id"] == 7
        pipe.zadd.assert_called_once_with("user:{a@x.com}:tasks", {"7": BASE_TIME.timestamp()})
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get(self, redis_store: RedisTaskStore, mock_redis: MagicMock) -> None:
        task = _task(task_id=3, status=TaskStatus.IN_PROGRESS, due_date=BASE_TIME)
        mock_redis.get.return_value = _raw(task)

        fetched = await redis_store.get(3)

        assert fetched == task
        mock_redis.get.assert_awaited_once_with("task:3")

    @pytest.mark.asyncio
    async def test_get_missing(self, redis_store: RedisTaskStore, mock_redis: MagicMock) -> None:
        assert await redis_store.get(3) is None

    @pytest.mark.asyncio
    async def test_save_only_existing(self, redis_store: RedisTaskStore, mock_redis: MagicMock) -> None:
        """save не воскрешает удалённую задачу (SET XX)."""
        assert await redis_store.save(_task(task_id=3)) is True

        args, kwargs = mock_redis.set.call_args
        assert args[0] == "task:3"
        assert kwargs == {"xx": True}

    @pytest.mark.asyncio
    async def test_save_after_concurrent_delete(self, redis_store: RedisTaskStore, mock_redis: MagicMock) -> None:
        """SET XX вернул None: задачи уже нет."""
        mock_redis.set.return_value = None

        assert await redis_store.save(_task(task_id=3)) is False

    @pytest.mark.asyncio
    async def test_save_without_id(self, redis_store: RedisTaskStore) -> None:
        with pytest.raises(ValueError):
            await redis_store.save(_task())

    @pytest.mark.asyncio
    async def test_remove(self, redis_store: RedisTaskStore, mock_redis: MagicMock) -> None:
        mock_redis.get.return_value = _raw(_task(task_id=3))
        mock_redis.pipe.execute.return_value = [1, 1]

        assert await redis_store.remove(3) is True
        mock_redis.pipe.delete.assert_called_once_with("task:3")
        mock_redis.pipe.zrem.assert_called_once_with("user:{a@x.com}:tasks", "3")

    @pytest.mark.asyncio
    async def test_remove_missing(self, redis_store: RedisTaskStore, mock_redis: MagicMock) -> None:
        assert await redis_store.remove(3) is False
        mock_redis.pipeline.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_unfiltered_uses_index_range(
        self, redis_store: RedisTaskStore, mock_redis: MagicMock
    ) -> None:
        """Без фильтров страница берётся прямо из sorted set."""
        tasks = [_task(task_id=5, minutes=5), _task(task_id=4, minutes=4)]
        mock_redis.zrevrange.return_value = ["5", "4"]
        mock_redis.mget.return_value = [_raw(t) for t in tasks]

        result = await redis_store.query("a@x.com", offset=10, limit=2)

        assert [t.id for t in result] == [5, 4]
        mock_redis.zrevrange.assert_awaited_once_with("user:{a@x.com}:tasks", 10, 11)
        mock_redis.mget.assert_awaited_once_with(["task:5", "task:4"])

    @pytest.mark.asyncio
    async def test_query_skips_stale_index_entries(
        self, redis_store: RedisTaskStore, mock_redis: MagicMock
    ) -> None:
        mock_redis.zrevrange.return_value = ["5", "4"]
        mock_redis.mget.return_value = [None, _raw(_task(task_id=4))]

        result = await redis_store.query("a@x.com", offset=0, limit=2)

        assert [t.id for t in result] == [4]

    @pytest.mark.asyncio
    async def test_query_search_ignores_status(self, redis_store: RedisTaskStore, mock_redis: MagicMock) -> None:
        tasks = [
            _task(task_id=3, minutes=3, title="Read"),
            _task(task_id=2, minutes=2, title="Buy MILK"),
            _task(task_id=1, minutes=1, title="Walk", description="milk run", status=TaskStatus.COMPLETED),
        ]
        mock_redis.zrevrange.return_value = ["3", "2", "1"]
        mock_redis.mget.return_value = [_raw(t) for t in tasks]

        result = await redis_store.query("a@x.com", offset=0, limit=10, status="completed", search="milk")

        assert [t.id for t in result] == [2, 1]
        mock_redis.zrevrange.assert_awaited_once_with("user:{a@x.com}:tasks", 0, -1)

    @pytest.mark.asyncio
    async def test_query_status_with_pagination(
        self, redis_store: RedisTaskStore, mock_redis: MagicMock
    ) -> None:
        tasks = [
            _task(task_id=3, minutes=3, status=TaskStatus.COMPLETED),
            _task(task_id=2, minutes=2),
            _task(task_id=1, minutes=1, status=TaskStatus.COMPLETED),
        ]
        mock_redis.zrevrange.return_value = ["3", "2", "1"]
        mock_redis.mget.return_value = [_raw(t) for t in tasks]

        result = await redis_store.query("a@x.com", offset=1, limit=5, status="completed")

        assert [t.id for t in result] == [1]

    def test_factory(self, mock_redis: MagicMock) -> None:
        assert isinstance(create_task_store("redis", redis_client=mock_redis), RedisTaskStore)
