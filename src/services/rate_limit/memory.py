"""In-memory RateLimiter.

Состояние корзин живёт в процессе, check-and-consume под asyncio.Lock.
"""

import asyncio
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from src.core.enums import RateLimitPolicy
from src.services.rate_limit.base import RateLimitDecision, RateLimiter
from src.shared.logging import get_logger

logger = get_logger()


@dataclass
class _Window:
    start: float
    used: int = 0


@dataclass
class _Log:
    hits: deque[tuple[float, int]] = field(default_factory=deque)
    used: int = 0


@dataclass
class _Bucket:
    tokens: float
    updated: float


class InMemoryRateLimiter(RateLimiter):
    """Rate limiter одного процесса с политиками fixed_window, sliding_window, token_bucket.

    Example:
        >>> limiter = InMemoryRateLimiter(capacity=10, interval_seconds=60)
        >>> decision = await limiter.consume("a@x.com")
        >>> decision.accepted
        True

    """

    def __init__(
        self,
        capacity: int,
        interval_seconds: float,
        policy: RateLimitPolicy | str = RateLimitPolicy.SLIDING_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Инициализировать limiter.

        Args:
            capacity: Единиц на интервал
            interval_seconds: Длина окна / время полного пополнения
            policy: Политика пополнения
            clock: Источник времени в секундах (monotonic)

        """
        super().__init__(capacity, interval_seconds, policy)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._windows: dict[str, _Window] = {}
        self._logs: dict[str, _Log] = {}
        self._buckets: dict[str, _Bucket] = {}
        self._last_sweep = clock()

        logger.info(
            "InMemoryRateLimiter инициализирован",
            capacity=capacity,
            interval=interval_seconds,
            policy=self.policy.value,
        )

    async def consume(self, key: str, cost: int = 1) -> RateLimitDecision:
        self._check_cost(cost)

        async with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.interval:
                self._evict_idle(now)
            if self.policy is RateLimitPolicy.FIXED_WINDOW:
                decision = self._consume_fixed_window(key, cost, now)
            elif self.policy is RateLimitPolicy.SLIDING_WINDOW:
                decision = self._consume_sliding_window(key, cost, now)
            else:
                decision = self._consume_token_bucket(key, cost, now)

        if not decision.accepted:
            logger.info("Rate limit превышен", key=key, retry_after=round(decision.retry_after, 3))

        return decision

    @property
    def tracked_keys(self) -> int:
        """Число ключей, для которых хранится состояние."""
        return len(self._windows) + len(self._logs) + len(self._buckets)

    def _evict_idle(self, now: float) -> None:
        """Удалить состояние, неотличимое от нового ключа.

        Истёкшее окно, пустой лог и полная корзина ведут себя так же, как отсутствующие.
        """
        rate = self.capacity / self.interval

        for key in [k for k, w in self._windows.items() if now - w.start >= self.interval]:
            del self._windows[key]

        for key in [k for k, log in self._logs.items() if not log.hits or log.hits[-1][0] <= now - self.interval]:
            del self._logs[key]

        for key in [
            k for k, b in self._buckets.items() if b.tokens + (now - b.updated) * rate >= self.capacity
        ]:
            del self._buckets[key]

        self._last_sweep = now
        logger.debug("Rate limiter очищен от простаивающих ключей", tracked=self.tracked_keys)

    def _consume_fixed_window(self, key: str, cost: int, now: float) -> RateLimitDecision:
        window = self._windows.get(key)
        if window is None or now - window.start >= self.interval:
            window = self._windows[key] = _Window(start=now)

        if window.used + cost > self.capacity:
            return RateLimitDecision(
                accepted=False,
                remaining=self.capacity - window.used,
                retry_after=window.start + self.interval - now,
            )

        window.used += cost
        return RateLimitDecision(accepted=True, remaining=self.capacity - window.used)

    def _consume_sliding_window(self, key: str, cost: int, now: float) -> RateLimitDecision:
        log = self._logs.setdefault(key, _Log())

        # Выбросить попадания старше интервала
        while log.hits and log.hits[0][0] <= now - self.interval:
            _, expired = log.hits.popleft()
            log.used -= expired

        if log.used + cost > self.capacity:
            # Ждать, пока истечёт столько старых попаданий, чтобы влез cost
            excess = log.used + cost - self.capacity
            retry_after = 0.0
            for hit_time, hit_cost in log.hits:
                excess -= hit_cost
                retry_after = hit_time + self.interval - now
                if excess <= 0:
                    break
            return RateLimitDecision(
                accepted=False,
                remaining=self.capacity - log.used,
                retry_after=retry_after,
            )

        log.hits.append((now, cost))
        log.used += cost
        return RateLimitDecision(accepted=True, remaining=self.capacity - log.used)

    def _consume_token_bucket(self, key: str, cost: int, now: float) -> RateLimitDecision:
        rate = self.capacity / self.interval
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = _Bucket(tokens=float(self.capacity), updated=now)

        bucket.tokens = min(float(self.capacity), bucket.tokens + (now - bucket.updated) * rate)
        bucket.updated = now

        if bucket.tokens < cost:
            return RateLimitDecision(
                accepted=False,
                remaining=int(bucket.tokens),
                retry_after=(cost - bucket.tokens) / rate,
            )

        bucket.tokens -= cost
        return RateLimitDecision(accepted=True, remaining=int(bucket.tokens))
