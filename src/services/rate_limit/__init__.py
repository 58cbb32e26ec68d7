"""Rate limiting для создания задач.

- RateLimiter / RateLimitDecision: контракт consume(key, cost)
- InMemoryRateLimiter: fixed_window, sliding_window, token_bucket в одном процессе
- RedisRateLimiter: fixed_window, sliding_window с общим состоянием в Redis
"""

from redis.asyncio import Redis

from src.core.enums import RateLimitPolicy, StorageBackend
from src.services.rate_limit.base import RateLimitDecision, RateLimiter
from src.services.rate_limit.memory import InMemoryRateLimiter
from src.services.rate_limit.redis_limiter import RedisRateLimiter


def create_rate_limiter(
    backend: StorageBackend | str,
    capacity: int,
    interval_seconds: float,
    policy: RateLimitPolicy | str,
    redis_client: Redis | None = None,
) -> RateLimiter:
    """Фабрика RateLimiter по имени backend.

    Args:
        backend: memory или redis
        capacity: Единиц на интервал
        interval_seconds: Длина окна / время полного пополнения
        policy: Политика пополнения
        redis_client: Async Redis client (обязателен для redis)

    Returns:
        Экземпляр RateLimiter

    """
    if StorageBackend(backend) is StorageBackend.REDIS:
        if redis_client is None:
            msg = "redis_client обязателен для redis backend"
            raise ValueError(msg)
        return RedisRateLimiter(redis_client, capacity, interval_seconds, policy)
    return InMemoryRateLimiter(capacity, interval_seconds, policy)


__all__ = [
    "InMemoryRateLimiter",
    "RateLimitDecision",
    "RateLimiter",
    "RedisRateLimiter",
    "create_rate_limiter",
]
