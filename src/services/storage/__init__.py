"""Хранилища задач.

- TaskStore: абстрактный интерфейс
- InMemoryTaskStore: один процесс (разработка, тесты)
- RedisTaskStore: общее хранилище для нескольких воркеров
"""

from redis.asyncio import Redis

from src.core.enums import StorageBackend
from src.services.storage.base import TaskStore
from src.services.storage.memory import InMemoryTaskStore
from src.services.storage.redis_store import RedisTaskStore


def create_task_store(backend: StorageBackend | str, redis_client: Redis | None = None) -> TaskStore:
    """Фабрика TaskStore по имени backend.

    Args:
        backend: memory или redis
        redis_client: Async Redis client (обязателен для redis)

    Returns:
        Экземпляр TaskStore

    """
    if StorageBackend(backend) is StorageBackend.REDIS:
        if redis_client is None:
            msg = "redis_client обязателен для redis backend"
            raise ValueError(msg)
        return RedisTaskStore(redis_client)
    return InMemoryTaskStore()


__all__ = [
    "InMemoryTaskStore",
    "RedisTaskStore",
    "TaskStore",
    "create_task_store",
]
