"""Redis RateLimiter.

Общие корзины для нескольких воркеров. Атомарность обеспечивает сам Redis:
- fixed_window: INCRBY + EXPIRE в одной MULTI транзакции
- sliding_window: Lua скрипт над sorted set попаданий

Redis Schema:
    ratelimit:fixed_window:{key}:{window}  -> String (счётчик окна)
    ratelimit:sliding_window:{key}         -> Sorted Set (попадания, score = время)
"""

import math
import time
import uuid
from collections.abc import Callable

from redis.asyncio import Redis

from src.core.constants import REDIS_RATE_LIMIT_KEY
from src.core.enums import RateLimitPolicy
from src.services.rate_limit.base import RateLimitDecision, RateLimiter
from src.shared.logging import get_logger

logger = get_logger()

SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local capacity = tonumber(ARGV[3])
local cost = tonumber(ARGV[4])
local member = ARGV[5]

redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
local used = redis.call('ZCARD', key)

if used + cost > capacity then
    local oldest = redis.call('ZRANGE', key, used + cost - capacity - 1, used + cost - capacity - 1, 'WITHSCORES')
    local retry = 0
    if oldest[2] then
        retry = tonumber(oldest[2]) + window - now
    end
    return {0, capacity - used, tostring(retry)}
end

for i = 1, cost do
    redis.call('ZADD', key, now, member .. ':' .. i)
end
redis.call('EXPIRE', key, math.ceil(window))
return {1, capacity - used - cost, '0'}
"""


class RedisRateLimiter(RateLimiter):
    """Rate limiter поверх Redis (fixed_window, sliding_window).

    Attributes:
        redis: Async Redis client (decode_responses=True)

    """

    def __init__(
        self,
        redis_client: Redis,
        capacity: int,
        interval_seconds: float,
        policy: RateLimitPolicy | str = RateLimitPolicy.SLIDING_WINDOW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Инициализировать limiter.

        Args:
            redis_client: Async Redis client
            capacity: Единиц на интервал
            interval_seconds: Длина окна
            policy: fixed_window или sliding_window
            clock: Wall clock (общий для всех воркеров)

        Raises:
            ValueError: token_bucket не поддерживается

        """
        super().__init__(capacity, interval_seconds, policy)
        if self.policy is RateLimitPolicy.TOKEN_BUCKET:
            msg = "RedisRateLimiter поддерживает только fixed_window и sliding_window"
            raise ValueError(msg)

        self.redis = redis_client
        self._clock = clock
        self._sliding_window = redis_client.register_script(SLIDING_WINDOW_SCRIPT)

        logger.info(
            "RedisRateLimiter инициализирован",
            capacity=capacity,
            interval=interval_seconds,
            policy=self.policy.value,
        )

    async def consume(self, key: str, cost: int = 1) -> RateLimitDecision:
        self._check_cost(cost)
        now = self._clock()

        if self.policy is RateLimitPolicy.FIXED_WINDOW:
            decision = await self._consume_fixed_window(key, cost, now)
        else:
            decision = await self._consume_sliding_window(key, cost, now)

        if not decision.accepted:
            logger.info("Rate limit превышен", key=key, retry_after=round(decision.retry_after, 3))

        return decision

    async def _consume_fixed_window(self, key: str, cost: int, now: float) -> RateLimitDecision:
        window = math.floor(now / self.interval)
        redis_key = REDIS_RATE_LIMIT_KEY.format(policy=self.policy.value, key=key) + f":{window}"

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incrby(redis_key, cost)
            pipe.expire(redis_key, math.ceil(self.interval))
            used, _ = await pipe.execute()

        used = int(used)
        if used > self.capacity:
            # Отклонённые единицы не занимают окно
            await self.redis.decrby(redis_key, cost)
            return RateLimitDecision(
                accepted=False,
                remaining=max(0, self.capacity - (used - cost)),
                retry_after=(window + 1) * self.interval - now,
            )

        return RateLimitDecision(accepted=True, remaining=self.capacity - used)

    async def _consume_sliding_window(self, key: str, cost: int, now: float) -> RateLimitDecision:
        redis_key = REDIS_RATE_LIMIT_KEY.format(policy=self.policy.value, key=key)

        accepted, remaining, retry_after = await self._sliding_window(
            keys=[redis_key],
            args=[now, self.interval, self.capacity, cost, uuid.uuid4().hex],
        )

        return RateLimitDecision(
            accepted=bool(int(accepted)),
            remaining=max(0, int(remaining)),
            retry_after=float(retry_after),
        )
